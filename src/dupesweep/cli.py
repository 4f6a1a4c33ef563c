#!/usr/bin/env python3
"""
dupesweep CLI — Command line interface for finding and removing duplicate files.
Uses the same session, scan controller and cleanup orchestrator as the GUI.
Removal always needs an explicit confirmation (or --force for scripts).
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import sys
import os
import threading
import time
from pathlib import Path
from typing import List, NoReturn, Optional
import logging

LOG_FORMAT = "%(levelname)-8s | %(name)-25s | %(message)s"

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    import send2trash  # noqa: F401
except ImportError:
    _MISSING_DEPS.append("send2trash")

try:
    import xxhash  # noqa: F401
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from dupesweep.core.cleanup import CleanupOrchestrator
from dupesweep.core.controller import ScanController
from dupesweep.core.exceptions import DupeSweepError, InvalidInputError
from dupesweep.core.filters import FilterEngine
from dupesweep.core.interfaces import FileOps, Scanner
from dupesweep.core.lifecycle import ScanState
from dupesweep.core.models import CleanupMode, CleanupOutcome, SweepParams
from dupesweep.core.scanner import FileSystemScanner
from dupesweep.core.selection import SelectionEngine
from dupesweep.core.session import DuplicateSession, SessionSnapshot
from dupesweep.services.file_service import SystemFileOps, configure_audit_log
from dupesweep.utils.convert_utils import ConvertUtils
from dupesweep.aliases import (
    STRATEGY_CHOICES, STRATEGY_HELP_TEXT,
    CATEGORY_CHOICES, CATEGORY_HELP_TEXT,
    EPILOG_TEXT
)


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self, scanner: Optional[Scanner] = None, file_ops: Optional[FileOps] = None):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.session = DuplicateSession()
        self.scanner = scanner or FileSystemScanner()
        self.file_ops = file_ops or SystemFileOps()
        self.controller: Optional[ScanController] = None

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="dupesweep",
            description="dupesweep — find duplicate files and remove the extra copies safely",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "--input", "-i",
            required=True,
            nargs="+",
            type=str,
            metavar="DIR",
            dest="roots",
            help="Directories (space separated) to scan for duplicates"
        )

        # Selection options
        parser.add_argument(
            "--keep", "-k",
            choices=STRATEGY_CHOICES,
            default="newest",
            type=str,
            help=STRATEGY_HELP_TEXT
        )
        parser.add_argument(
            "--categories", "-c",
            nargs="+",
            choices=CATEGORY_CHOICES,
            default=[],
            type=str,
            metavar="",
            help=CATEGORY_HELP_TEXT
        )

        # Actions
        action = parser.add_mutually_exclusive_group()
        action.add_argument(
            "--trash",
            action="store_true",
            help="Move the selected copies to the system trash (recoverable)"
        )
        action.add_argument(
            "--delete",
            action="store_true",
            help="Delete the selected copies permanently (NOT recoverable)"
        )
        parser.add_argument(
            "--batch",
            action="store_true",
            help="Remove all files in one request; if it fails nothing is counted as removed"
        )
        parser.add_argument(
            "--workers", "-w",
            default=1,
            type=int,
            metavar="",
            help="Parallel removals in file-by-file mode. Default: 1"
        )
        parser.add_argument(
            "--audit-log",
            default=None,
            type=str,
            metavar="FILE",
            help="Append a line per removed file to FILE"
        )

        # Output options
        parser.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --trash/--delete (for automation/scripts)"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress and debug logging"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        removing = args.trash or args.delete
        if args.force and not removing:
            self.error_exit("--force can only be used with --trash or --delete")
        if args.batch and not removing:
            self.error_exit("--batch can only be used with --trash or --delete")

        # Prevent interactive confirmation in non-TTY environments
        if removing and not args.force:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        for root in args.roots:
            root_path = Path(root).resolve()
            if not root_path.exists():
                self.error_exit(f"Directory not found: {root}")
            if not root_path.is_dir():
                self.error_exit(f"Path is not a directory: {root}")

    def create_params(self, args: argparse.Namespace) -> SweepParams:
        """Create SweepParams from CLI arguments."""
        try:
            return SweepParams.from_cli_values(
                roots=[str(Path(r).resolve()) for r in args.roots],
                strategy=args.keep,
                categories=args.categories,
                removal_mode="delete" if args.delete else "trash",
                batch=args.batch,
                max_workers=args.workers,
                audit_log_path=args.audit_log,
            )
        except InvalidInputError as e:
            self.error_exit(f"Parameter error: {e}")

    def on_session_change(self, snapshot: SessionSnapshot) -> None:
        """CLI progress listener - shows progress in console."""
        if not self.verbose or snapshot.progress is None:
            return
        p = snapshot.progress
        sys.stderr.write("\r  " + ConvertUtils.progress_to_human(p.phase, p.current, p.total))
        sys.stderr.flush()

    def run_scan(self, params: SweepParams) -> ScanState:
        """
        Runs the scan on a background thread so Ctrl+C can request cancellation.
        """
        self.controller = ScanController(self.session, self.scanner, default_strategy=params.default_strategy)
        outcome = {}

        def target():
            try:
                outcome["state"] = self.controller.start_scan(params.roots)
            except DupeSweepError as e:
                outcome["error"] = e

        thread = threading.Thread(target=target, name="dupesweep-scan", daemon=True)
        thread.start()
        try:
            while thread.is_alive():
                thread.join(0.1)
        except KeyboardInterrupt:
            if not self.quiet:
                print("\nCancelling scan...", file=sys.stderr)
            self.controller.cancel_scan()
            thread.join()

        if self.verbose:
            sys.stderr.write("\n")

        if "error" in outcome:
            self.error_exit(str(outcome["error"]))
        return outcome.get("state", self.session.state)

    def output_results(self, snapshot: SessionSnapshot) -> None:
        """Print the visible duplicate groups, marking what is kept and what is selected."""
        if self.quiet:
            return

        groups = snapshot.visible_groups
        if not groups:
            print("No duplicate groups found.")
            return

        total_files = sum(len(g.files) for g in groups)
        print(f"\nFound {len(groups)} duplicate groups ({total_files} files)")

        for idx, group in enumerate(groups, 1):
            size_str = ConvertUtils.bytes_to_human(group.size)
            print(f"\n📁 Group {idx} | Size: {size_str} | Files: {len(group.files)}")
            print("-" * 60)
            for file in group.files:
                marker = "[DEL] " if file.path in snapshot.selection else "[KEEP]"
                modified = ConvertUtils.timestamp_to_human(file.modified_at)
                print(f"   {marker} {file.path}")
                print(f"          Modified: {modified}")

    def confirm(self, mode: CleanupMode, count: int, size: int, force: bool) -> bool:
        """Explicit operator confirmation before anything is removed."""
        if force:
            print("⚠️  WARNING: --force flag skips confirmation. Proceeding...")
            return True

        if not sys.stdin.isatty() or not sys.stdout.isatty():
            self.error_exit(
                "Lost interactive terminal during operation. "
                "Use --force to proceed in non-interactive environments."
            )

        size_str = ConvertUtils.bytes_to_human(size)
        if mode is CleanupMode.PERMANENT_DELETE:
            question = f"PERMANENTLY delete {count} files ({size_str})? This cannot be undone. [y/N]: "
        else:
            question = f"Move {count} files ({size_str}) to trash? [y/N]: "
        response = input(question)
        return response.strip().lower() in ("y", "yes")

    def execute_cleanup(self, params: SweepParams, force: bool = False) -> Optional[CleanupOutcome]:
        """Remove the selected copies in the visible groups after confirmation."""
        snapshot = self.session.snapshot()
        visible = set(FilterEngine.visible_paths(snapshot.visible_groups))
        selection = snapshot.selection & visible

        if not selection:
            if not self.quiet:
                print("No files selected for removal.")
            return None

        size = SelectionEngine.compute_selection_size(snapshot.groups, selection)
        if not self.confirm(params.removal_mode, len(selection), size, force):
            print("Removal cancelled by user.")
            return None

        configure_audit_log(params.audit_log_path)
        orchestrator = CleanupOrchestrator(
            self.session, self.file_ops,
            execution=params.execution,
            max_workers=params.max_workers
        )
        if not self.quiet:
            print(f"\n{params.removal_mode.phase_label} {len(selection)} files")

        outcome = orchestrator.execute_cleanup(selection, params.removal_mode)
        if self.verbose:
            sys.stderr.write("\n")
        self.report_outcome(outcome)
        return outcome

    def report_outcome(self, outcome: CleanupOutcome) -> None:
        """Post-operation summary: count removed, bytes freed, first failures."""
        freed = ConvertUtils.bytes_to_human(outcome.bytes_freed)
        if outcome.error is not None and not outcome.removed_paths:
            print(f"❌ Batch operation failed, nothing was removed: {outcome.error}", file=sys.stderr)
            return

        if outcome.error is not None:
            print(f"❌ Batch operation stopped: {outcome.error}", file=sys.stderr)
            print(f"\n⚠️  Partial success: {outcome.files_removed}/{outcome.requested} files removed.")
            print(f"Total space freed: {freed}")
            return

        if outcome.failures:
            print(f"\n⚠️  Partial success: {outcome.files_removed}/{outcome.requested} files removed.")
            print(f"Failed to remove {len(outcome.failures)} file(s):")
            for path, error in list(outcome.failures.items())[:5]:
                print(f"  • {os.path.basename(path)}: {error}")
            if len(outcome.failures) > 5:
                print(f"  ...and {len(outcome.failures) - 5} more files")
        else:
            print(f"✅ Successfully removed {outcome.files_removed} files.")
        print(f"Total space freed: {freed}")

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet

        logging.basicConfig(level=logging.DEBUG if self.verbose else logging.ERROR, format=LOG_FORMAT)

        self.validate_args(args)
        params = self.create_params(args)

        self.session.add_listener(self.on_session_change)

        if not self.quiet:
            print(f"Scanning {len(params.roots)} director{'y' if len(params.roots) == 1 else 'ies'}...")

        state = self.run_scan(params)
        self.session.set_categories(params.categories)
        snapshot = self.session.snapshot()

        if state is ScanState.CANCELLED:
            print(snapshot.notice or "Scan cancelled.")
            sys.exit(130)
        if state is ScanState.FAILED:
            self.error_exit(f"Scan failed: {snapshot.error}")

        self.output_results(snapshot)

        if args.trash or args.delete:
            self.execute_cleanup(params, force=args.force)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
