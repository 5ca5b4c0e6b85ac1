"""
BranchChat - multi-provider chat backend with branching conversation history.
"""

__version__ = "1.0.0"
