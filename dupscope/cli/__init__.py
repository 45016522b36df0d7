"""Command line interface for dupscope"""
