# bootstrap/__init__.py
# -*- coding: utf-8 -*-
"""
Container bootstrap for the DSMR reader image.

The steps in this package run once at container start: credential checks,
device permissions, the database readiness gate, the Django post
configuration and the hand-over to the process supervisor.
"""
