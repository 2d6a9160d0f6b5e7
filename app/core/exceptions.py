class ConfigurationError(Exception):
    """A required configuration value is missing; raised before any network call."""


class ShopifyAPIError(Exception):
    """The Shopify GraphQL endpoint could not be reached or rejected the request."""


class PageLoadError(Exception):
    """A product listing response was unusable. No partial page is returned."""


class GenerationAPIError(Exception):
    """The language-model endpoint failed or returned an unusable envelope."""
