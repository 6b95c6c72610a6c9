# configure/__init__.py
# -*- coding: utf-8 -*-
"""Configurators for the remote datalogger client and the nginx reverse proxy."""
