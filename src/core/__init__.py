"""Core components for the AWS sub-resource provider.

This module contains the foundational components including AWS client
management, configuration handling, resource state and retry handling.
"""
