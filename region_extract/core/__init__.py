#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core functionality for region extraction.

This module contains the core components for decoding, parameter handling,
configuration management, and logging setup.
"""
