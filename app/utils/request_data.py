from flask import request


def json_object():
    """The request's JSON body if it is an object, else an empty dict."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
