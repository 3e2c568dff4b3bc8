"""dnfctl - Package environment capture for Fedora.

Classifies installed packages, locks exact versions and verifies,
diffs, exports or restores that state later.
"""

__version__ = "0.3.0"
