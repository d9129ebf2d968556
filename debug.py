import sys

debug_flag = False
def set_debug(flag):
    global debug_flag
    debug_flag = flag

def debug(*args, **kwargs):
    if debug_flag:
        kwargs['file'] = sys.stderr
        print(*args, **kwargs)
