"""Shared helpers for GuildHelperBot"""
