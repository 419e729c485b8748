# scrapers/errors.py


class RecipeExtractionError(Exception):
    """Base class for errors surfaced by the recipe extractor"""


class FetchError(RecipeExtractionError):
    """The primary page could not be fetched or returned a non-2xx status"""

    def __init__(self, url, status=None, status_text=''):
        self.url = url
        self.status = status
        self.status_text = status_text
        if status is None:
            message = f"Failed to fetch URL {url}: {status_text}"
        else:
            message = f"Failed to fetch URL {url}: {status} {status_text}".rstrip()
        super().__init__(message)


class NoRecipeFoundError(RecipeExtractionError):
    """No strategy produced a usable recipe candidate"""

    def __init__(self, url):
        self.url = url
        super().__init__(f"Could not extract recipe from URL: {url}")


class StrategyError(RecipeExtractionError):
    """A single extraction strategy raised; never fatal for the extraction"""

    def __init__(self, strategy, cause):
        self.strategy = strategy
        self.cause = cause
        super().__init__(f"Strategy '{strategy}' failed: {cause}")


class JsonParseError(ValueError):
    """A JSON-LD script block could not be parsed"""


class PrintFetchError(RecipeExtractionError):
    """The print version of a page could not be fetched or parsed"""

    def __init__(self, print_url, cause):
        self.print_url = print_url
        self.cause = cause
        super().__init__(f"Print version {print_url} failed: {cause}")
