# featscale/core/data_handler.py

"""
Handles reading and writing feature tables from/to various file formats.

Supports tabular data (CSV, JSON) via Pandas and numerical data (NPZ) via NumPy.
"""

import sys
import logging
from pathlib import Path
from typing import Union, Any, Dict, List, Optional

import pandas as pd
import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

# --- Supported Formats ---
TABULAR_FORMATS = {".csv", ".json"}
ARRAY_FORMATS = {".npz"}
SUPPORTED_READ_FORMATS = TABULAR_FORMATS | ARRAY_FORMATS
SUPPORTED_WRITE_FORMATS = TABULAR_FORMATS | ARRAY_FORMATS

# --- Type Aliases for Clarity ---
# ReadResult defines the possible types returned by read_data
ReadResult = Union[
    pd.DataFrame,                # For CSV, JSON
    Dict[str, NDArray[Any]],     # For NPZ
]

# SaveInput defines the possible types accepted by save_data
SaveInput = Union[
    pd.DataFrame,
    NDArray[Any],                # Single NumPy array
    Dict[str, NDArray[Any]],     # Dictionary of NumPy arrays (for NPZ)
]


# --- Core I/O Functions ---

def read_data(file_path: Union[str, Path]) -> ReadResult:
    """
    Loads data from a supported file format (CSV, JSON, NPZ).

    Args:
        file_path: Path object or string path to the input file, or '-' for stdin.

    Returns:
        A DataFrame for CSV/JSON input, or a dict of arrays for NPZ input.

    Raises:
        ValueError: If the file format is not supported or the path is not a file.
        FileNotFoundError: If the file does not exist (and is not '-').
        RuntimeError: If the underlying reader fails.
    """
    file_path_str = str(file_path)

    if file_path_str == "-":
        logger.info("Reading data from stdin (assuming CSV format).")
        try:
            return pd.read_csv(sys.stdin)
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            logger.error(f"Error reading from stdin: {e}")
            raise ValueError("Failed to read CSV data from stdin.") from e

    fpath = Path(file_path_str)
    logger.info(f"Reading data from: {fpath}")
    if not fpath.exists():
        raise FileNotFoundError(f"Input file not found: {fpath}")
    if not fpath.is_file():
        raise ValueError(f"Input path is not a file: {fpath}")

    ext = fpath.suffix.lower()
    if ext not in SUPPORTED_READ_FORMATS:
        raise ValueError(f"Unsupported file format: '{ext}'. Supported formats: {sorted(SUPPORTED_READ_FORMATS)}")

    try:
        if ext == ".csv":
            logger.debug(f"Reading CSV file: {fpath}")
            return pd.read_csv(fpath)
        if ext == ".json":
            logger.debug(f"Reading JSON file: {fpath}")
            try:
                return pd.read_json(fpath, orient='records')
            except ValueError:
                logger.warning(f"Failed to read JSON with orient='records' for {fpath.name}, trying line-delimited.")
                return pd.read_json(fpath, lines=True)
        # .npz
        logger.debug(f"Loading NPZ file: {fpath}")
        with np.load(fpath) as npz_file:
            data_dict = {key: npz_file[key] for key in npz_file.files}
        logger.debug(f"NPZ file loaded with keys: {list(data_dict.keys())}")
        return data_dict
    except Exception as e:
        logger.error(f"Failed reading file {fpath}: {e}")
        raise RuntimeError(f"Failed to read data from {fpath}.") from e


def save_data(
    data: SaveInput,
    output_path: Union[str, Path],
    float_precision: Optional[int] = None
) -> Path:
    """
    Saves data to a specified file format (CSV, JSON, NPZ).

    Args:
        data: The data to save (see `SaveInput` type alias).
        output_path: Path object or string path for the output file.
                     The extension determines the save format.
        float_precision: Decimal places for floats in CSV output (None keeps full precision).

    Returns:
        The resolved output path.

    Raises:
        ValueError: If the output format does not fit the data type.
        TypeError: If the input `data` type is not supported.
    """
    fpath = Path(output_path).resolve()
    ext = fpath.suffix.lower()
    logger.info(f"Saving data to: {fpath} (format: {ext})")

    if ext not in SUPPORTED_WRITE_FORMATS:
        raise ValueError(f"Unsupported output file format: '{ext}'. Supported formats: {sorted(SUPPORTED_WRITE_FORMATS)}")

    fpath.parent.mkdir(parents=True, exist_ok=True)
    float_format = f"%.{float_precision}f" if float_precision is not None else None

    try:
        if isinstance(data, pd.DataFrame):
            if ext == ".csv":
                data.to_csv(fpath, index=False, float_format=float_format)
            elif ext == ".json":
                data.to_json(fpath, orient="records", indent=2)
            else:
                logger.debug("Converting DataFrame to dict of arrays for NPZ saving.")
                np.savez(fpath, **{str(col): data[col].to_numpy() for col in data.columns})

        elif isinstance(data, np.ndarray):
            if ext == ".npz":
                logger.debug("Saving single NumPy array to NPZ with key 'data'.")
                np.savez(fpath, data=data)
            elif ext == ".csv":
                if data.ndim == 1:
                    pd.DataFrame(data, columns=['value']).to_csv(fpath, index=False, float_format=float_format)
                elif data.ndim == 2:
                    pd.DataFrame(data).to_csv(fpath, index=False, header=False, float_format=float_format)
                else:
                    raise ValueError("Cannot save NumPy array with >2 dimensions as CSV.")
            else:
                raise ValueError(f"Cannot save single NumPy array to format '{ext}'. Use NPZ or CSV.")

        elif isinstance(data, dict) and all(isinstance(v, np.ndarray) for v in data.values()):
            if ext == ".npz":
                logger.debug(f"Saving dictionary of {len(data)} NumPy arrays to NPZ.")
                np.savez(fpath, **data)
            else:
                raise ValueError(f"Cannot save dictionary of NumPy arrays to format '{ext}'. Use NPZ.")

        else:
            raise TypeError(f"Unsupported data type for saving: {type(data)}. See SaveInput type alias.")

    except (ValueError, TypeError) as e:
        logger.error(f"Error saving file {fpath}: {e}")
        raise

    logger.info(f"Data successfully saved to {fpath}")
    return fpath

# --- Table Helpers ---

def to_frame(data: ReadResult) -> pd.DataFrame:
    """
    Coerces a `read_data` result into a DataFrame.

    A dict of arrays becomes one column per 1D array; all arrays must share a length.

    Raises:
        ValueError: If the arrays are not 1D or their lengths differ.
        TypeError: For any other input type.
    """
    if isinstance(data, pd.DataFrame):
        return data
    if isinstance(data, dict):
        lengths = {key: np.asarray(arr).shape for key, arr in data.items()}
        bad = [key for key, shape in lengths.items() if len(shape) != 1]
        if bad:
            raise ValueError(f"Only 1D arrays can be used as table columns; got non-1D arrays for keys {bad}")
        if len({shape[0] for shape in lengths.values()}) > 1:
            raise ValueError(f"Arrays have different lengths: {lengths}")
        return pd.DataFrame({key: np.asarray(arr) for key, arr in data.items()})
    raise TypeError(f"Cannot convert {type(data)} to a DataFrame.")


def select_numeric_columns(df: pd.DataFrame, columns: Optional[List[str]] = None) -> List[str]:
    """
    Resolves the list of columns to scale.

    Args:
        df: The input table.
        columns: Requested columns. If None or empty, every numeric column is used.

    Returns:
        List of column names, in the requested order (or table order).

    Raises:
        ValueError: If a requested column is missing or non-numeric, or no
                    numeric column exists.
    """
    if columns:
        missing = [col for col in columns if col not in df.columns]
        if missing:
            raise ValueError(f"Column(s) not found: {missing}. Available: {list(df.columns)}")
        non_numeric = [col for col in columns if not pd.api.types.is_numeric_dtype(df[col])]
        if non_numeric:
            raise ValueError(f"Column(s) are not numeric and cannot be scaled: {non_numeric}")
        return list(columns)

    numeric = [col for col in df.columns if pd.api.types.is_numeric_dtype(df[col]) and not pd.api.types.is_bool_dtype(df[col])]
    if not numeric:
        raise ValueError("Input table has no numeric columns to scale.")
    logger.debug(f"Selected numeric columns: {numeric}")
    return numeric
