"""
Command line entry points. Each `main_*` function wraps a plain python
function with `generalized_main`, which builds the argument parser from the
function signature.
"""
import logging

from growthrates.errors import ConfigurationError
from growthrates.util.io import read_dataframe, read_yaml
from growthrates.util.cli import generalized_main
from growthrates.fitting import (
    fit_batch,
    to_table,
    all_easylinear
)

logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("model", "grouping")

_CONFIG_DEFAULTS = {
    "time":"time",
    "y":"value",
    "initial":None,
    "initial_file":None,
    "lower":None,
    "upper":None,
    "which":None,
    "transform":"identity",
    "cores":None,
    "method":"auto",
    "max_nfev":None,
}


def _configure_logging(loglevel):

    level = getattr(logging, str(loglevel).upper(), None)
    if not isinstance(level, int):
        raise ConfigurationError(f"loglevel '{loglevel}' not recognized")

    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def load_batch_config(config_file):
    """
    Read a batch fit configuration and fill in defaults.

    Parameters
    ----------
    config_file : str, pathlib.Path or dict
        YAML file (or loaded dictionary) with keys `model`, `grouping` and
        `initial` or `initial_file`. Optional keys: `time`, `y`, `lower`,
        `upper`, `which`, `transform`, `cores`, `method` and `max_nfev`.

    Returns
    -------
    dict
        configuration with every key present. If `initial_file` was given,
        `initial` holds the dataframe read from it.

    Raises
    ------
    ConfigurationError
        for missing or unrecognized keys, or if both or neither of `initial`
        and `initial_file` are given
    """

    config = read_yaml(config_file)

    missing = [k for k in _REQUIRED_KEYS if k not in config]
    unknown = [k for k in config
               if k not in _REQUIRED_KEYS and k not in _CONFIG_DEFAULTS]
    if missing or unknown:
        err = "Problem with the batch configuration.\n"
        if missing:
            err += f"    missing keys: {missing}\n"
        if unknown:
            err += f"    unrecognized keys: {unknown}\n"
        raise ConfigurationError(err)

    config = {**_CONFIG_DEFAULTS, **config}

    if (config["initial"] is None) == (config["initial_file"] is None):
        raise ConfigurationError(
            "exactly one of 'initial' or 'initial_file' must be given"
        )

    if config["initial_file"] is not None:
        config["initial"] = read_dataframe(config["initial_file"])

    return config


def fit_batch_cli(data_file,
                  config_file,
                  out_file="growthrates_fit.csv",
                  cores=None,
                  loglevel="WARNING"):
    """
    Fit a growth model to every group in a data file.

    Parameters
    ----------
    data_file : str
        csv/tsv/xlsx file with the time, value and grouping columns
    config_file : str
        YAML file describing the fit (model, grouping, initial, lower,
        upper, which, transform, cores ...)
    out_file : str, default="growthrates_fit.csv"
        csv file to write the results table to
    cores : int, optional
        number of worker processes. Overrides the configuration file.
    loglevel : str, default="WARNING"
        logging level (DEBUG, INFO, WARNING ...)

    Returns
    -------
    BatchFitResult
    """

    _configure_logging(loglevel)

    config = load_batch_config(config_file)
    if cores is not None:
        config["cores"] = cores

    data = read_dataframe(data_file)

    logger.info("read %d rows from %s", len(data), data_file)

    fit_kwargs = {"method":config["method"]}
    if config["max_nfev"] is not None:
        fit_kwargs["max_nfev"] = config["max_nfev"]

    batch = fit_batch(config["model"],
                      data,
                      grouping=config["grouping"],
                      initial=config["initial"],
                      lower=config["lower"],
                      upper=config["upper"],
                      which=config["which"],
                      transform=config["transform"],
                      time=config["time"],
                      y=config["y"],
                      cores=config["cores"],
                      **fit_kwargs)

    to_table(batch).to_csv(out_file, index=False)
    logger.info("wrote results for %d groups to %s", len(batch), out_file)

    return batch


def easylinear_cli(data_file,
                   grouping,
                   time="time",
                   y="value",
                   h=5,
                   quota=0.95,
                   out_file="growthrates_easylinear.csv"):
    """
    Estimate maximum growth rates of every group in a data file from the
    steepest log-linear segment of each curve.

    Parameters
    ----------
    data_file : str
        csv/tsv/xlsx file with the time, value and grouping columns
    grouping : list of str
        column(s) defining the groups
    time, y : str
        names of the time and value columns
    h : int, default=5
        number of points in each regression window
    quota : float, default=0.95
        windows with a slope of at least quota * max(slope) are used
    out_file : str, default="growthrates_easylinear.csv"
        csv file to write the results table to

    Returns
    -------
    EasyLinearBatch
    """

    data = read_dataframe(data_file)
    batch = all_easylinear(data,
                           grouping=grouping,
                           time=time,
                           y=y,
                           h=h,
                           quota=quota)

    batch.to_table().to_csv(out_file, index=False)

    return batch


def main_fit(argv=None):
    return generalized_main(fit_batch_cli,
                            argv=argv,
                            manual_arg_types={"cores":int})


def main_easylinear(argv=None):
    return generalized_main(easylinear_cli,
                            argv=argv,
                            manual_arg_nargs={"grouping":"+"})
