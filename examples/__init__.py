"""Example command trees for ``cliweb serve`` and ``cliweb render``."""
