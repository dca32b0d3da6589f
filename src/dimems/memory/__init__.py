"""Memory repositories and the classifier.

Layout (defaults)::

    <vault>/
    ├── short-term.md                  # Short-term: single append-only log
    ├── episodes/
    │   └── 2024-03/
    │       └── 2024-03-01-kickoff.md  # Episodic: one file per event
    ├── concepts/                      # Long-term, category "concept" (and "other")
    ├── methods/                       # Long-term, category "method"
    ├── people/                        # Long-term, category "person"
    └── .system/                       # Logs

Every record file is markdown with YAML frontmatter; there is no index file.
"""
