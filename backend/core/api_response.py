def success(data=None):
    return {
        "success": True,
        "data": data,
    }


def error(code, message, details=None):
    body = {
        "success": False,
        "error": {
            "code": code,
            "message": message,
        },
    }
    if details:
        body["error"]["details"] = details
    return body
