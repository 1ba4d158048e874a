"""Questlog: gamified learning-habit tracker API."""

__version__ = "4.0.0"
