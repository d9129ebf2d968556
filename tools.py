def call(fn, *args):
    """
    Run a generator-based recursive function without growing the Python stack.

    The generator yields [callee, arg1, arg2, ...] to request a nested call; the
    callee must itself be a generator function. The nested call's return value
    is sent back into the caller.
    """
    stack = [fn(*args)]
    result = None
    while len(stack) > 0:
        current = stack[-1]
        try:
            yielded = current.send(result)
            stack.append(yielded[0](*(yielded[1:])))
            result = None
        except StopIteration as e:
            stack.pop()
            result = e.value
    return result
