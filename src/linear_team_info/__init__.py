"""Linear team info extractor.

Fetches a Linear team's workflow states, labels and members, and reports each
member's most common labels as JSON:
- configuration loaded from flags, the environment and `.env`
- structured logging on stderr
- an optional same-day report cache
"""

__version__ = "0.1.0"

from linear_team_info.config import LinearSettings

__all__ = ["__version__", "LinearSettings"]
