"""Group and channel lists with lazily loaded logos."""
import base64
import flet as ft
from typing import Callable, Optional
from ..models.channel import Channel
from ..models.playlist import Group, Playlist
from ..services.logo_loader import LogoLoader, to_png_bytes


class ChannelList(ft.Container):
    """Two-pane browser: groups on the left, the selected group's channels on the right."""

    # Number of channel tiles to build at a time
    PAGE_SIZE = 50
    LOGO_SIZE = 44

    def __init__(
        self,
        playlist: Playlist,
        logo_loader: LogoLoader,
        on_channel_select: Optional[Callable[[Channel], None]] = None,
    ):
        super().__init__(expand=True)
        self._playlist = playlist
        self._logo_loader = logo_loader
        self._on_channel_select = on_channel_select
        self._selected_group: Optional[Group] = None
        self._displayed_count = 0

        self._build_ui()

    def _build_ui(self):
        self._group_list = ft.ListView(spacing=2, expand=True)
        for group in self._playlist.groups:
            self._group_list.controls.append(
                ft.ListTile(
                    title=ft.Text(group.name or "Uncategorized", max_lines=1),
                    trailing=ft.Text(str(len(group)), color=ft.Colors.WHITE38),
                    on_click=lambda e, g=group: self._select_group(g),
                )
            )

        self._channel_list = ft.ListView(spacing=4, expand=True)
        self._load_more_btn = ft.TextButton(
            "Load More",
            icon=ft.Icons.EXPAND_MORE_ROUNDED,
            visible=False,
            on_click=self._load_more,
        )

        self.content = ft.Row(
            [
                ft.Container(self._group_list, width=260),
                ft.VerticalDivider(width=1),
                ft.Column([self._channel_list, self._load_more_btn], expand=True),
            ],
            expand=True,
        )

    def select_first_group(self):
        if self._playlist.groups:
            self._select_group(self._playlist.groups[0])

    def _select_group(self, group: Group):
        self._selected_group = group
        self._channel_list.controls.clear()
        self._displayed_count = 0
        self._append_page()

    def _load_more(self, e):
        self._append_page()

    def _append_page(self):
        channels = self._selected_group.channels if self._selected_group else []
        start = self._displayed_count
        end = min(start + self.PAGE_SIZE, len(channels))
        for channel in channels[start:end]:
            self._channel_list.controls.append(self._build_channel_tile(channel))
        self._displayed_count = end
        self._load_more_btn.visible = end < len(channels)
        if self.page:
            self.page.update()

    def _build_channel_tile(self, channel: Channel) -> ft.Control:
        logo = ft.Container(
            content=ft.Icon(ft.Icons.LIVE_TV_ROUNDED, color=ft.Colors.WHITE54, size=18),
            width=self.LOGO_SIZE,
            height=self.LOGO_SIZE,
            alignment=ft.alignment.center,
        )
        if channel.logo and self.page:
            self.page.run_task(self._load_logo, channel, logo)

        return ft.Container(
            content=ft.Row(
                [logo, ft.Text(channel.name or channel.url, max_lines=1, expand=True)],
                vertical_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            padding=ft.padding.symmetric(horizontal=12, vertical=6),
            on_click=lambda e, ch=channel: self._select_channel(ch),
        )

    async def _load_logo(self, channel: Channel, holder: ft.Container):
        # A missing logo keeps the placeholder icon
        image = await self._logo_loader.get_logo(channel)
        if image is None:
            return
        holder.content = ft.Image(
            src_base64=base64.b64encode(to_png_bytes(image)).decode("ascii"),
            width=self.LOGO_SIZE,
            height=self.LOGO_SIZE,
            fit=ft.ImageFit.CONTAIN,
        )
        if holder.page:
            holder.update()

    def _select_channel(self, channel: Channel):
        if self._on_channel_select:
            self._on_channel_select(channel)
