from growthrates.errors import ConfigurationError

def check_columns(df, required_columns):
    """
    Make sure a dataframe has every required column.

    Parameters
    ----------
    df : pandas.DataFrame
        dataframe to check
    required_columns : list of str
        columns that must be present

    Raises
    ------
    ConfigurationError
        listing the missing columns, in the order they were requested
    """

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        err = "Not all required columns seen. Missing columns:\n"
        for c in missing:
            err += f"    {c}\n"
        raise ConfigurationError(err)
