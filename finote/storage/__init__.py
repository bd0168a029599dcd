# finote/storage/__init__.py
from importlib import import_module


def get_store(config, name=None):
    """Instantiate the storage backend named in the config's ``stores`` registry."""
    name = name or config.get('store', 'json')
    try:
        store_path = config['stores'][name]
    except KeyError:
        raise KeyError(f"Unknown store backend '{name}'.")
    module_name, cls_name = store_path.rsplit('.', 1)
    mod = import_module(module_name)
    return getattr(mod, cls_name)(config)
