import pandas as pd

from pathlib import Path


def read_dataframe(source):
    """
    Read a table from a file path or copy an existing DataFrame.

    Handles .csv, .tsv and .xlsx/.xls files; anything else is read with
    delimiter sniffing. A leading 'Unnamed: 0' column holding 0, 1, 2, ...
    (written by `df.to_csv()` without `index=False`) is dropped.

    Parameters
    ----------
    source : pandas.DataFrame, str or pathlib.Path
        dataframe or path to read

    Returns
    -------
    pandas.DataFrame
    """

    if isinstance(source, pd.DataFrame):
        return source.copy()

    if not isinstance(source, (str, Path)):
        raise TypeError("`source` must be a file path or pandas DataFrame.")

    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"File not found at path: {path}")

    ext = path.suffix.lower()
    if ext in [".xlsx", ".xls"]:
        df = pd.read_excel(path)
    elif ext == ".csv":
        df = pd.read_csv(path)
    elif ext == ".tsv":
        df = pd.read_csv(path, sep="\t")
    else:
        df = pd.read_csv(path, sep=None, engine="python")

    unnamed_col = "Unnamed: 0"
    if unnamed_col in df.columns:
        col_data = df[unnamed_col]
        if pd.api.types.is_integer_dtype(col_data) and \
           col_data.equals(pd.RangeIndex(start=0, stop=len(df)).to_series()):
            df = df.drop(columns=unnamed_col)

    return df
