#!/usr/bin/env python3
"""coursegit - navigate lesson commits in a course repository."""

from coursegit.cli import main

if __name__ == "__main__":
    main()
