"""CLI log inspector — list, read, and search the files of a rotating stream."""

import argparse
import os
import sys

from rotatefile.inspector import list_stream_files, read_file, search_files


def main():
    parser = argparse.ArgumentParser(description="Inspect a rotating log stream")
    parser.add_argument("--path", default=os.environ.get("LOG_PATH", "./logs/application.log"),
                        help="Active log file of the stream")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--list", action="store_true", help="List active, retired and backup files")
    group.add_argument("--read", metavar="FILENAME", help="Read a specific file")
    group.add_argument("--search", metavar="TEXT", help="Search text across all files")
    args = parser.parse_args()
    log_dir = os.path.dirname(args.path) or "."

    if args.list:
        files = list_stream_files(args.path)
        if not files:
            print("No log files found.")
            return
        for name in files:
            size = os.path.getsize(os.path.join(log_dir, name))
            if size < 1024:
                size_str = f"{size} B"
            elif size < 1024 * 1024:
                size_str = f"{size / 1024:.1f} KB"
            else:
                size_str = f"{size / (1024 * 1024):.1f} MB"
            print(f"  {name}  ({size_str})")

    elif args.read:
        try:
            sys.stdout.buffer.write(read_file(log_dir, args.read))
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    elif args.search:
        results = search_files(args.path, args.search)
        if not results:
            print(f"No matches found for '{args.search}'.")
            return
        for filename, line_num, line in results:
            print(f"  [{filename}:{line_num}] {line}")


if __name__ == "__main__":
    main()
