"""GitMirror: caching download gateway for GitHub-hosted files"""

__version__ = '0.1.0'
