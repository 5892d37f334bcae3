"""Installable package assembly for generated prompt sets."""

from .debian import DebianPackageBuilder, PackageSpec

__all__ = ["DebianPackageBuilder", "PackageSpec"]
