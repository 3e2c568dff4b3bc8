"""Package installers for dnfctl."""

from dnfctl.operators.base import Installer
from dnfctl.operators.dnf import DnfInstaller

__all__ = ["DnfInstaller", "Installer"]
