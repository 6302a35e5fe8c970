from parse_rest.core.dispatcher.dispatcher import RequestDispatcher, normalize_server_url

__all__ = ["RequestDispatcher", "normalize_server_url"]
