from blinker import Namespace

_signals = Namespace()

# Sent with the path whose cached rendering is stale after a mutation
path_invalidated = _signals.signal('path-invalidated')


def revalidate_path(path):
    if not path:
        return
    path_invalidated.send(path)
