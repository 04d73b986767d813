"""
Shell Explorer - Shell environment, project and bookmark explorer
Lists aliases and functions, scans package manifests, cleans node_modules,
organizes loose files and analyzes Chrome bookmarks.
"""

__version__ = "1.0.0"
