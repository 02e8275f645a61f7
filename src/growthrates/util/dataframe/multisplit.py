import numpy as np

from growthrates.util.dataframe.check_columns import check_columns
from growthrates.errors import ConfigurationError

def as_grouping(grouping):
    """
    Normalize a grouping specification (a column name or a list of column
    names) to a tuple of column names.
    """

    if isinstance(grouping, str):
        grouping = [grouping]

    grouping = tuple(grouping)
    if len(grouping) == 0:
        raise ConfigurationError("grouping must name at least one column.")
    if len(set(grouping)) != len(grouping):
        raise ConfigurationError(f"grouping has duplicated columns: {grouping}")

    return grouping


def multisplit(df, grouping):
    """
    Split a dataframe into one sub-dataframe per distinct combination of the
    grouping columns.

    Parameters
    ----------
    df : pandas.DataFrame
        dataframe to split
    grouping : str or list of str
        column(s) that define the groups

    Returns
    -------
    dict
        dictionary keying group tuples (one value per grouping column, even
        for a single column) to sub-dataframes. Groups appear in the order
        they first appear in `df`. Every row lands in exactly one group; rows
        with missing grouping values form their own group.
    """

    grouping = as_grouping(grouping)
    check_columns(df, grouping)

    out = {}
    for key, sub_df in df.groupby(list(grouping),
                                  sort=False,
                                  dropna=False,
                                  observed=True):
        if not isinstance(key, tuple):
            key = (key,)

        # Plain python scalars so keys print and compare cleanly
        key = tuple(k.item() if isinstance(k, np.generic) else k for k in key)
        out[key] = sub_df

    return out
