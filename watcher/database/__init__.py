"""
Database access for captured chain data and watcher state.
"""
