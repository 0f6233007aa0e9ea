"""
Pure formatters for leveling display strings.

Contains zero business logic, only formatting for:
- Experience numbers (K/M suffixes)
- Progress bars
- The multi-line level status block

All functions are pure (no side effects, no store or config access); the
caller passes in a `LevelSnapshot`.

Usage:
    >>> from bloodcraft.ui.formatters import format_level_status
    >>> message = format_level_status(store.snapshot(player_id))
"""

from bloodcraft.domain.models.player_record import LevelSnapshot
from bloodcraft.ui.colors import get_level_color
from bloodcraft.ui.titles import get_level_title

FILLED_BLOCK = "█"
EMPTY_BLOCK = "░"


def format_experience(value: float) -> str:
    """
    Compact experience number.

    Example:
        >>> format_experience(1_500_000)
        '1.5M'
        >>> format_experience(2_345)
        '2.3K'
        >>> format_experience(999.6)
        '1000'
    """
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return f"{value:.0f}"


def render_progress_bar(progress: int, length: int = 20) -> str:
    """
    Render a progress bar with its percentage.

    Args:
        progress: Percent, clamped to [0, 100]
        length: Bar width in characters

    Returns:
        Formatted bar string

    Example:
        >>> render_progress_bar(50, 10)
        '[█████░░░░░] 50%'
    """
    progress = max(0, min(100, progress))
    filled = round(length * progress / 100)
    filled = max(0, min(length, filled))
    return f"[{FILLED_BLOCK * filled}{EMPTY_BLOCK * (length - filled)}] {progress}%"


def format_level_status(snapshot: LevelSnapshot) -> str:
    """
    Multi-line status block for a player.

    Example:
        >>> print(format_level_status(snapshot))
        <color=#00FF00>Level 12</color> (Apprentice)
        Experience: 2.3K | To next level: 310
        Progress: [████████░░░░░░░░░░░░] 42%
    """
    color = get_level_color(snapshot.level)
    title = get_level_title(snapshot.level, snapshot.max_level)
    header = f"<color={color}>Level {snapshot.level}</color> ({title})"

    if snapshot.is_max_level:
        return (
            f"{header} - Max level reached!\n"
            f"Total experience: {format_experience(snapshot.experience)}"
        )

    return (
        f"{header}\n"
        f"Experience: {format_experience(snapshot.experience)}"
        f" | To next level: {format_experience(snapshot.experience_to_next_level)}\n"
        f"Progress: {render_progress_bar(snapshot.progress_percent)}"
    )
