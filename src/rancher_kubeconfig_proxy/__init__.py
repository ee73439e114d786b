"""Merged kubeconfig generation for Rancher managed clusters."""

__version__ = "0.1.0"
