#!/usr/bin/env python3

"""
yuv - YUM/DNF repository manager

Detects the running RPM-based distribution, generates repository
configuration for public mirrors and third-party repositories, and
forwards package operations to dnf or yum.
"""

__version__ = "0.3.0"
__author__ = "yuv Project"
