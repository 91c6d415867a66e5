"""Serve the tracker API with Daphne."""
import logging
from typing import Any

from daphne.cli import CommandLineInterface
from django.conf import settings
from django.core.management.base import BaseCommand, CommandParser

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Run the phone tracker API on Daphne (default port from SERVER_PORT)."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            '--port', '-p',
            type=int,
            default=None,
            help="TCP port to listen on (default: SERVER_PORT setting)",
        )
        parser.add_argument(
            '--bind', '-b',
            default='0.0.0.0',
            help="Address to bind to (default: 0.0.0.0)",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        port = options['port'] if options['port'] is not None else settings.SERVER_PORT
        bind = options['bind']
        application = settings.ASGI_APPLICATION.rsplit('.', 1)

        logger.info("Phone tracker server listening on %s:%d", bind, port)
        CommandLineInterface().run([
            '--bind', bind,
            '--port', str(port),
            f"{application[0]}:{application[1]}",
        ])
