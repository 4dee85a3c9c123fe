"""
ConfigCommand — Configuration management

Handles configuration operations:
- Displaying current configuration
- Setting configuration values (user or project scope)
"""

from ..commands.base import BaseCommand
from ..presentation.template import OutputTemplate


class ConfigCommand(BaseCommand):
    """Command for viewing and changing configuration."""

    def show_config(self):
        """Show current configuration."""
        template = OutputTemplate(symbols=self.symbols)
        template.header("HELM CONFIG", "Current Configuration")
        template.section("SETTINGS", self._cli.config_manager.display())
        print(template.render())

    def set_config(self, key: str, value: str, scope: str = "user"):
        """Set a configuration value. Returns 1 when the value is rejected."""
        symbols = self.symbols
        manager = self._cli.config_manager
        error = manager.set(key, value, scope)

        template = OutputTemplate(symbols=symbols)
        if error:
            template.header("HELM CONFIG", "Error")
            template.section("ERROR", error)
            print(template.render())
            return 1

        template.header("HELM CONFIG", "Configuration Updated")
        template.section("SETTING", f"Set {key} = {value}")
        path = manager.project_config_path if scope == "project" else manager.user_config_path
        template.section("SAVED TO", str(path))
        template.footer(f"{symbols.check_pass} Configuration saved")
        print(template.render())
        return None


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'config'


def register_parser(subparsers):
    """Register config command parser."""
    p = subparsers.add_parser('config', help='View or set configuration')
    p.add_argument('--set', metavar='KEY=VALUE',
                   help='Set config value (e.g., identity.name=alice)')
    p.add_argument('--local', dest='project_scope', action='store_true',
                   help='Apply to project config (.helm/config.yaml) instead of user')
    return p


def handle(cli, args):
    """Handle config command dispatch."""
    if args.set:
        if '=' not in args.set:
            print("Error: Use format KEY=VALUE (e.g., identity.name=alice)")
            return 1
        key, value = args.set.split('=', 1)
        scope = "project" if args.project_scope else "user"
        return cli._config_cmd.set_config(key, value, scope)
    cli._config_cmd.show_config()
    return None
