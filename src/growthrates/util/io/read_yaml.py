import yaml
import re

from growthrates.errors import ConfigurationError

_SCI_NOTATION = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)$')


def _normalize_types(node):
    """
    Recursively convert scientific-notation strings (which PyYAML leaves as
    strings when written without a decimal point, e.g. '1e-6') to numbers and
    whole-number floats to ints.
    """

    if isinstance(node, dict):
        return {k: _normalize_types(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_normalize_types(elem) for elem in node]

    if isinstance(node, str):
        if not _SCI_NOTATION.match(node):
            return node
        node = float(node)

    if isinstance(node, float) and node.is_integer():
        return int(node)

    return node


def read_yaml(cf, override_keys=None):
    """
    Load a YAML configuration file.

    Parameters
    ----------
    cf : str, pathlib.Path or dict
        path to the YAML file. A dict is assumed to be an already-loaded
        configuration and is copied.
    override_keys : dict, optional
        values that replace top-level keys in the configuration. Every key
        must already be present in the file.

    Returns
    -------
    dict
        the configuration

    Raises
    ------
    ConfigurationError
        if the file is missing, cannot be parsed, does not hold a mapping, or
        `override_keys` names a key that is not in the configuration
    """

    if isinstance(cf, dict):
        config = dict(cf)
    else:
        try:
            with open(cf, 'r') as f:
                config = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found at '{cf}'") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing YAML file '{cf}': {e}") from e

        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Configuration file '{cf}' must hold a mapping of settings."
            )

    config = _normalize_types(config)

    if override_keys is not None:
        for k in override_keys:
            if k not in config:
                raise ConfigurationError(
                    f"override_keys has a key '{k}' that was not in configuration."
                )
            config[k] = override_keys[k]

    return config
