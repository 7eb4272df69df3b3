"""Provisioning primitives for cloud resources used by the azvm workflow."""
