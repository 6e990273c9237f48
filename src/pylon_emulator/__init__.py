"""Pylon wallet emulator."""
