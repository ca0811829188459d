"""hookgate - GitHub webhook delivery gate for aiohttp"""
__version__ = "0.1.0"
