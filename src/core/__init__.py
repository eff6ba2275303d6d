"""Core domain package for chatsweep.

Core contains the retention policy, the sweeper and the port contracts without
any Firebase, SQLite or filesystem-specific code, keeping the job portable.
"""
