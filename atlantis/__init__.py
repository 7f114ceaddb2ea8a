"""Comment parsing, locking, workspaces and tooling for Terraform pull request automation."""

__version__ = "0.2.4"

__all__ = ["__version__"]