from dupesweep.core.models import FileCategory, SelectionStrategy

STRATEGY_ALIASES = {
    "newest": SelectionStrategy.NEWEST,
    "oldest": SelectionStrategy.OLDEST,
    "shortest": SelectionStrategy.SHORTEST_PATH,
}

STRATEGY_CHOICES = list(STRATEGY_ALIASES.keys())

STRATEGY_HELP_TEXT = (
    "Which copy to keep in every duplicate group:\n"
    "  newest   : Keep the most recently modified file (default)\n"
    "  oldest   : Keep the least recently modified file\n"
    "  shortest : Keep the file with the shortest path\n"
    "Example    : %(prog)s -i ~/Downloads --keep oldest --trash\n"
)

CATEGORY_ALIASES = {
    "document": FileCategory.DOCUMENT,
    "image": FileCategory.IMAGE,
    "video": FileCategory.VIDEO,
    "other": FileCategory.OTHER,
}

CATEGORY_CHOICES = list(CATEGORY_ALIASES.keys())

CATEGORY_HELP_TEXT = (
    "File categories to show and act on (space separated). Default: all\n"
    "  document : pdf doc docx txt rtf\n"
    "  image    : jpg jpeg png gif webp svg\n"
    "  video    : mp4 mkv avi mov webm\n"
    "  other    : everything else\n"
)

EPILOG_TEXT = """
Examples:
  List duplicate groups in two folders
  %(prog)s -i ~/Downloads ~/Pictures

  Only images and videos, keep the oldest copy, move the rest to trash (asks first)
  %(prog)s -i ~/Pictures --categories image video --keep oldest --trash

  Delete permanently without confirmation and keep an audit trail (for scripts)
  %(prog)s -i ~/Downloads --delete --force --audit-log ~/dupesweep_deletions.txt

  Remove in one batch request instead of file by file
  %(prog)s -i ~/Downloads --trash --batch
"""
