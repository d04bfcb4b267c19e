#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility modules for region extraction.

This package contains general-purpose helpers shared by the processor
and the command line.
"""
