from __future__ import annotations

from linear_team_info.main import main

if __name__ == "__main__":
    raise SystemExit(main())
