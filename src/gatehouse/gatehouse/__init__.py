# ABOUTME: Core package initialization for the access-controlled service core
# ABOUTME: Provides token issuance and validation, scope checks, rate limiting and transactional repositories

"""
Gatehouse service core.

This package provides the reusable engine a web backend sits on: bearer token
issuance and validation, scope-based authorization, per-caller rate limiting,
and repositories composed atomically through units of work. It follows the
interfaces / models / implementations split, so callers depend on abstract
capabilities and pick a concrete backend at wiring time.
"""

__version__ = "0.1.0"
