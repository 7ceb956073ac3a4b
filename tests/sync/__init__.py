"""
Test suite for drift detection and sync state.

- SyncEngine transitions, degenerate mode and concurrency
- Fingerprints of files and directory trees
- PollingWatcher change detection, repair callbacks and stream semantics
"""
