"""Shared Kernel module.

This module contains foundational components that are explicitly shared
between the local datastore and the sync client. Changes to this module
affect both sides and should be carefully coordinated.
"""
