"""Management Commands - Server administration

Admin commands for server configuration:
- /settings - Toggle bot features for this server (Admin only)
"""
from typing import TYPE_CHECKING

import discord
from discord import app_commands

if TYPE_CHECKING:
    from discord.ext import commands


def build_settings_embed(guild: discord.Guild, current: dict) -> discord.Embed:
    from ..guild_settings import FEATURES

    embed = discord.Embed(
        title=f"⚙️ Bot Settings for {guild.name}",
        description="Configure which features are enabled in this server:",
        color=discord.Color.blue(),
    )
    for feature, (name, desc) in FEATURES.items():
        status = "✅ Enabled" if current.get(feature, False) else "❌ Disabled"
        embed.add_field(name=name, value=f"{desc}\n**Status:** {status}", inline=False)
    embed.set_footer(text="Use the buttons below to toggle features")
    return embed


def register_management_commands(bot: "commands.Bot"):
    """Register management commands with the bot.

    Args:
        bot: The Discord bot instance
    """
    from ..config import logger
    from ..guild_settings import FEATURES, get_all_guild_settings, toggle_guild_setting

    @bot.tree.command(name="settings", description="Configure bot features for this server (Admin only)")
    @app_commands.default_permissions(administrator=True)
    async def settings_command(interaction: discord.Interaction):
        """Configure which bot features are enabled for this server.

        Only server administrators can use this command.
        """
        logger.info(f"🔧 /settings called by {interaction.user} in guild {interaction.guild.name if interaction.guild else 'DM'}")
        if not interaction.guild:
            await interaction.response.send_message("❌ This command can only be used in a server.", ephemeral=True)
            return

        guild = interaction.guild

        def create_updated_view():
            """Create view with current button states."""
            current = get_all_guild_settings(guild.id)
            new_view = discord.ui.View(timeout=300)  # 5 minute timeout

            for feature, (name, _) in FEATURES.items():
                enabled = current.get(feature, False)
                button = discord.ui.Button(
                    label=f"{'Disable' if enabled else 'Enable'} {name.split(maxsplit=1)[-1]}",
                    style=discord.ButtonStyle.red if enabled else discord.ButtonStyle.green,
                    custom_id=f"toggle_{feature}",
                )

                def make_callback(f=feature, n=name):
                    async def callback(bi: discord.Interaction):
                        if not bi.user.guild_permissions.administrator:
                            await bi.response.send_message("❌ Only administrators can change settings.", ephemeral=True)
                            return

                        enabled = toggle_guild_setting(guild.id, f)

                        await bi.response.send_message(
                            f"✅ {n} {'enabled' if enabled else 'disabled'}!",
                            ephemeral=True,
                        )

                        await interaction.edit_original_response(
                            embed=build_settings_embed(guild, get_all_guild_settings(guild.id)),
                            view=create_updated_view(),
                        )

                    return callback

                button.callback = make_callback()
                new_view.add_item(button)

            return new_view

        await interaction.response.send_message(
            embed=build_settings_embed(guild, get_all_guild_settings(guild.id)),
            view=create_updated_view(),
            ephemeral=True,
        )
