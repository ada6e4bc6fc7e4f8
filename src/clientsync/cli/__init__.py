"""Command-line interface for clientsync."""

from __future__ import annotations

import asyncio as asyncio
import logging as logging

from clientsync import ClientSync as ClientSync
from clientsync import load_config as load_config
from clientsync.cli.app import main as main
from clientsync.cli.commands import cache as cache_command
from clientsync.cli.commands import correct as correct_command
from clientsync.cli.commands import sync as sync_command
from clientsync.cli.common import format_sync_summary
from clientsync.cli.parser import build_parser as build_parser

_format_summary = format_sync_summary

_run_sync = sync_command.run_sync
_run_correct = correct_command.run_correct
_run_cache_clear = cache_command.run_cache_clear
