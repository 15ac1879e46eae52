"""Provider adapter implementations

Every ``*_providers.py`` module here is imported by
``scan_and_import_providers()``; its ``@register_provider`` classes then
become available to ``ModelProviderRegistry``.
"""

__all__ = []
