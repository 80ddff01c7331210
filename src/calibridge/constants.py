"""
Flag values accepted by the native calibration operations.

Values must match the native library's enums; they are forwarded verbatim.
"""

# ============================================================================
# Termination criteria
# ============================================================================

TERM_CRITERIA_COUNT = 1
TERM_CRITERIA_MAX_ITER = TERM_CRITERIA_COUNT
TERM_CRITERIA_EPS = 2

DBL_EPSILON = 2.220446049250313e-16
FLT_EPSILON = 1.1920928955078125e-07

# ============================================================================
# Robust estimation methods
# ============================================================================

LMEDS = 4
RANSAC = 8
RHO = 16
USAC_DEFAULT = 32
USAC_PARALLEL = 33
USAC_FM_8PTS = 34
USAC_FAST = 35
USAC_ACCURATE = 36
USAC_PROSAC = 37
USAC_MAGSAC = 38

# ============================================================================
# Pose solvers
# ============================================================================

SOLVEPNP_ITERATIVE = 0
SOLVEPNP_EPNP = 1
SOLVEPNP_P3P = 2
SOLVEPNP_DLS = 3
SOLVEPNP_UPNP = 4
SOLVEPNP_AP3P = 5
SOLVEPNP_IPPE = 6
SOLVEPNP_IPPE_SQUARE = 7
SOLVEPNP_SQPNP = 8

# ============================================================================
# Pattern detection
# ============================================================================

CALIB_CB_ADAPTIVE_THRESH = 1
CALIB_CB_NORMALIZE_IMAGE = 2
CALIB_CB_FILTER_QUADS = 4
CALIB_CB_FAST_CHECK = 8
CALIB_CB_EXHAUSTIVE = 16
CALIB_CB_ACCURACY = 32
CALIB_CB_LARGER = 64
CALIB_CB_MARKER = 128

CALIB_CB_SYMMETRIC_GRID = 1
CALIB_CB_ASYMMETRIC_GRID = 2
CALIB_CB_CLUSTERING = 4

# ============================================================================
# Camera calibration
# ============================================================================

CALIB_USE_INTRINSIC_GUESS = 0x00001
CALIB_FIX_ASPECT_RATIO = 0x00002
CALIB_FIX_PRINCIPAL_POINT = 0x00004
CALIB_ZERO_TANGENT_DIST = 0x00008
CALIB_FIX_FOCAL_LENGTH = 0x00010
CALIB_FIX_K1 = 0x00020
CALIB_FIX_K2 = 0x00040
CALIB_FIX_K3 = 0x00080
CALIB_FIX_K4 = 0x00800
CALIB_FIX_K5 = 0x01000
CALIB_FIX_K6 = 0x02000
CALIB_RATIONAL_MODEL = 0x04000
CALIB_THIN_PRISM_MODEL = 0x08000
CALIB_FIX_S1_S2_S3_S4 = 0x10000
CALIB_TILTED_MODEL = 0x40000
CALIB_FIX_TAUX_TAUY = 0x80000
CALIB_USE_QR = 0x100000
CALIB_FIX_TANGENT_DIST = 0x200000
CALIB_FIX_INTRINSIC = 0x00100
CALIB_SAME_FOCAL_LENGTH = 0x00200
CALIB_ZERO_DISPARITY = 0x00400
CALIB_USE_LU = 1 << 17
CALIB_USE_EXTRINSIC_GUESS = 1 << 22

# ============================================================================
# Epipolar geometry
# ============================================================================

FM_7POINT = 1
FM_8POINT = 2
FM_LMEDS = 4
FM_RANSAC = 8

# ============================================================================
# Hand-eye calibration
# ============================================================================

CALIB_HAND_EYE_TSAI = 0
CALIB_HAND_EYE_PARK = 1
CALIB_HAND_EYE_HORAUD = 2
CALIB_HAND_EYE_ANDREFF = 3
CALIB_HAND_EYE_DANIILIDIS = 4

CALIB_ROBOT_WORLD_HAND_EYE_SHAH = 0
CALIB_ROBOT_WORLD_HAND_EYE_LI = 1

# ============================================================================
# Fisheye model
# ============================================================================

FISHEYE_CALIB_USE_INTRINSIC_GUESS = 1 << 0
FISHEYE_CALIB_RECOMPUTE_EXTRINSIC = 1 << 1
FISHEYE_CALIB_CHECK_COND = 1 << 2
FISHEYE_CALIB_FIX_SKEW = 1 << 3
FISHEYE_CALIB_FIX_K1 = 1 << 4
FISHEYE_CALIB_FIX_K2 = 1 << 5
FISHEYE_CALIB_FIX_K3 = 1 << 6
FISHEYE_CALIB_FIX_K4 = 1 << 7
FISHEYE_CALIB_FIX_INTRINSIC = 1 << 8
FISHEYE_CALIB_FIX_PRINCIPAL_POINT = 1 << 9
FISHEYE_CALIB_ZERO_DISPARITY = 1 << 10
FISHEYE_CALIB_FIX_FOCAL_LENGTH = 1 << 11

# ============================================================================
# Map types for undistortion maps
# ============================================================================

CV_16SC2 = 11
CV_32FC1 = 5
CV_32FC2 = 13
