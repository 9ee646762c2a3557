"""Local persistence for meetbook.

Layout:
    ~/.meetbook/data/
    ├── contacts.json      # Contact array
    ├── meetings.json      # Meeting array
    └── theme.json         # "light" | "dark"

Each key is one JSON file. Writes land before the mutating call returns.
"""
