#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Processing modules for region extraction.

This package contains the scaling policy, pixel transforms, input/output
adapters and the extraction processor that ties them together.
"""
