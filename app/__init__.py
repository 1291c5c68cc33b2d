"""Notification dispatch service package.

Keeping this file makes ``app`` a regular package so it is never resolved as a
namespace package from site-packages.
"""
