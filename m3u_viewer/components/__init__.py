# Components package
from .channel_list import ChannelList
