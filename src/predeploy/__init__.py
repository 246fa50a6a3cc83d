"""Pre-deployment tool bootstrapper for the EKS security workshop."""

__version__ = "0.1.0"
