import numpy as np


def smooth_elevations(elevations, threshold=100, sequential=True):
    """
    Replace elevation outliers with values taken from their neighbours.

    Values above ``threshold`` are outliers. An interior outlier becomes the
    mean of its left and right neighbours, an outlier at either end becomes a
    copy of its single neighbour. Values at or below the threshold are left
    untouched.

    Parameters
    ----------
    elevations : array-like
        Ordered elevation values along the cross section
    threshold : float, default=100
        Outlier threshold in elevation units
    sequential : bool, default=True
        If True, outliers are replaced left to right and neighbours are read
        from the array being rewritten, so a run of adjacent outliers passes
        partially smoothed values forward. If False, neighbours are always
        read from the original elevations.

    Returns
    -------
    np.ndarray
        New array of the same length as the input
    """
    original = np.asarray(elevations, dtype=float)
    smoothed = original.copy()
    n = len(smoothed)
    if n < 2:
        return smoothed

    source = smoothed if sequential else original
    for i in np.flatnonzero(original > threshold):
        if i == 0:
            smoothed[i] = source[1]
        elif i == n - 1:
            smoothed[i] = source[n - 2]
        else:
            smoothed[i] = (source[i - 1] + source[i + 1]) / 2
    return smoothed
