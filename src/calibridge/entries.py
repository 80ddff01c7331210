"""
The wrapped native operations.

One row per logical operation. Parameter names are the native ones;
defaults are the native library's documented defaults.
"""

from __future__ import annotations

from .constants import (
    CALIB_CB_ADAPTIVE_THRESH,
    CALIB_CB_NORMALIZE_IMAGE,
    CALIB_CB_SYMMETRIC_GRID,
    CALIB_FIX_INTRINSIC,
    CALIB_HAND_EYE_TSAI,
    CALIB_ROBOT_WORLD_HAND_EYE_SHAH,
    CALIB_ZERO_DISPARITY,
    DBL_EPSILON,
    FLT_EPSILON,
    FM_RANSAC,
    RANSAC,
    SOLVEPNP_ITERATIVE,
    TERM_CRITERIA_COUNT,
    TERM_CRITERIA_EPS,
    TERM_CRITERIA_MAX_ITER,
)
from .marshal import (
    BOOL,
    DOUBLE,
    DOUBLE_OUT,
    FLOAT,
    INT,
    MAT_IN,
    MAT_INOUT,
    MAT_OUT,
    MATS_IN,
    MATS_OUT,
    POINT,
    POINT_OUT,
    POINTS2F,
    POINTS2F_OUT,
    POINTS3F,
    RECT,
    RECT_OUT,
    SIZE,
    TERM_CRITERIA,
)
from .table import EMPTY, EntryPoint, EntryPointTable, Param as P, Returns

NO_SIZE = (0.0, 0.0)

CALIBRATE_CRITERIA = (TERM_CRITERIA_COUNT + TERM_CRITERIA_EPS, 30, DBL_EPSILON)
STEREO_CRITERIA = (TERM_CRITERIA_COUNT + TERM_CRITERIA_EPS, 30, 1e-6)
FISHEYE_CRITERIA = (TERM_CRITERIA_COUNT + TERM_CRITERIA_EPS, 100, DBL_EPSILON)
REFINE_CRITERIA = (TERM_CRITERIA_EPS + TERM_CRITERIA_COUNT, 20, FLT_EPSILON)
UNDISTORT_CRITERIA = (TERM_CRITERIA_MAX_ITER + TERM_CRITERIA_EPS, 5, 0.01)

# Shared parameter groups
_CAMERA = (
    P("cameraMatrix", MAT_IN),
    P("distCoeffs", MAT_IN, EMPTY),
)
_PNP_INPUTS = (
    P("objectPoints", POINTS3F),
    P("imagePoints", POINTS2F),
    P("cameraMatrix", MAT_IN),
    P("distCoeffs", MAT_IN),
)


# ============================================================================
# Rotation, projection and composition
# ============================================================================

_GEOMETRY = [
    EntryPoint(
        "Rodrigues",
        (P("src", MAT_IN), P("dst", MAT_OUT), P("jacobian", MAT_OUT, EMPTY)),
        doc="Convert a rotation vector to a rotation matrix or vice versa.",
    ),
    EntryPoint(
        "RQDecomp3x3",
        (
            P("src", MAT_IN),
            P("mtxR", MAT_OUT),
            P("mtxQ", MAT_OUT),
            P("Qx", MAT_OUT, EMPTY),
            P("Qy", MAT_OUT, EMPTY),
            P("Qz", MAT_OUT, EMPTY),
        ),
        Returns.VEC3D,
        doc="RQ decomposition of a 3x3 matrix; returns the Euler angles in degrees.",
    ),
    EntryPoint(
        "decomposeProjectionMatrix",
        (
            P("projMatrix", MAT_IN),
            P("cameraMatrix", MAT_OUT),
            P("rotMatrix", MAT_OUT),
            P("transVect", MAT_OUT),
            P("rotMatrixX", MAT_OUT, EMPTY),
            P("rotMatrixY", MAT_OUT, EMPTY),
            P("rotMatrixZ", MAT_OUT, EMPTY),
            P("eulerAngles", MAT_OUT, EMPTY),
        ),
        doc="Split a 3x4 projection matrix into camera, rotation and translation.",
    ),
    EntryPoint(
        "matMulDeriv",
        (
            P("A", MAT_IN),
            P("B", MAT_IN),
            P("dABdA", MAT_OUT, name="d_ab_d_a"),
            P("dABdB", MAT_OUT, name="d_ab_d_b"),
        ),
        doc="Partial derivatives of a matrix product with respect to each factor.",
    ),
    EntryPoint(
        "composeRT",
        (
            P("rvec1", MAT_IN),
            P("tvec1", MAT_IN),
            P("rvec2", MAT_IN),
            P("tvec2", MAT_IN),
            P("rvec3", MAT_OUT),
            P("tvec3", MAT_OUT),
            P("dr3dr1", MAT_OUT, EMPTY),
            P("dr3dt1", MAT_OUT, EMPTY),
            P("dr3dr2", MAT_OUT, EMPTY),
            P("dr3dt2", MAT_OUT, EMPTY),
            P("dt3dr1", MAT_OUT, EMPTY),
            P("dt3dt1", MAT_OUT, EMPTY),
            P("dt3dr2", MAT_OUT, EMPTY),
            P("dt3dt2", MAT_OUT, EMPTY),
        ),
        doc="Combine two rotation-and-shift transformations, optionally with Jacobians.",
    ),
    EntryPoint(
        "projectPoints",
        (
            P("objectPoints", POINTS3F),
            P("rvec", MAT_IN),
            P("tvec", MAT_IN),
            *_CAMERA,
            P("imagePoints", POINTS2F_OUT, EMPTY),
            P("jacobian", MAT_OUT, EMPTY),
            P("aspectRatio", DOUBLE, 0.0),
        ),
        doc="Project 3D points to the image plane.",
    ),
]


# ============================================================================
# Homography and pose
# ============================================================================

_POSE = [
    EntryPoint(
        "findHomography",
        (
            P("srcPoints", POINTS2F),
            P("dstPoints", POINTS2F),
            P("method", INT, 0),
            P("ransacReprojThreshold", DOUBLE, 3.0),
            P("mask", MAT_OUT, EMPTY),
            P("maxIters", INT, 2000),
            P("confidence", DOUBLE, 0.995),
        ),
        Returns.MAT,
        doc="Perspective transformation between two planes (0, RANSAC, LMEDS or RHO).",
    ),
    EntryPoint(
        "solvePnP",
        (
            *_PNP_INPUTS,
            P("rvec", MAT_INOUT),
            P("tvec", MAT_INOUT),
            P("useExtrinsicGuess", BOOL, False),
            P("flags", INT, SOLVEPNP_ITERATIVE),
        ),
        Returns.BOOL,
        doc="Object pose from 3D-2D point correspondences.",
    ),
    EntryPoint(
        "solvePnPRansac",
        (
            *_PNP_INPUTS,
            P("rvec", MAT_INOUT),
            P("tvec", MAT_INOUT),
            P("useExtrinsicGuess", BOOL, False),
            P("iterationsCount", INT, 100),
            P("reprojectionError", FLOAT, 8.0),
            P("confidence", DOUBLE, 0.99),
            P("inliers", MAT_OUT, EMPTY),
            P("flags", INT, SOLVEPNP_ITERATIVE),
        ),
        Returns.BOOL,
        doc="Object pose from 3D-2D point correspondences using RANSAC.",
    ),
    EntryPoint(
        "solveP3P",
        (
            *_PNP_INPUTS,
            P("rvecs", MATS_OUT),
            P("tvecs", MATS_OUT),
            P("flags", INT),
        ),
        Returns.INT,
        doc="Pose from exactly three correspondences; returns the number of solutions.",
    ),
    EntryPoint(
        "solvePnPRefineLM",
        (
            *_PNP_INPUTS,
            P("rvec", MAT_INOUT),
            P("tvec", MAT_INOUT),
            P("criteria", TERM_CRITERIA, REFINE_CRITERIA),
        ),
        doc="Refine a pose with Levenberg-Marquardt.",
    ),
    EntryPoint(
        "solvePnPRefineVVS",
        (
            *_PNP_INPUTS,
            P("rvec", MAT_INOUT),
            P("tvec", MAT_INOUT),
            P("criteria", TERM_CRITERIA, REFINE_CRITERIA),
            P("VVSlambda", DOUBLE, 1.0, name="vvs_lambda"),
        ),
        doc="Refine a pose with virtual visual servoing.",
    ),
    EntryPoint(
        "solvePnPGeneric",
        (
            *_PNP_INPUTS,
            P("rvecs", MATS_OUT),
            P("tvecs", MATS_OUT),
            P("useExtrinsicGuess", BOOL, False),
            P("flags", INT, SOLVEPNP_ITERATIVE),
            P("rvec", MAT_IN, EMPTY),
            P("tvec", MAT_IN, EMPTY),
            P("reprojectionError", MAT_OUT, EMPTY),
        ),
        Returns.INT,
        doc="All pose solutions of the selected solver; returns the solution count.",
    ),
    EntryPoint(
        "initCameraMatrix2D",
        (
            P("objectPoints", MATS_IN),
            P("imagePoints", MATS_IN),
            P("imageSize", SIZE),
            P("aspectRatio", DOUBLE, 1.0),
        ),
        Returns.MAT,
        doc="Initial camera matrix from 3D-2D correspondences.",
    ),
]


# ============================================================================
# Calibration pattern detection
# ============================================================================

_PATTERNS = [
    EntryPoint(
        "findChessboardCorners",
        (
            P("image", MAT_IN),
            P("patternSize", SIZE),
            P("corners", POINTS2F_OUT),
            P("flags", INT, CALIB_CB_ADAPTIVE_THRESH + CALIB_CB_NORMALIZE_IMAGE),
        ),
        Returns.BOOL,
        doc="Find the inner corners of a chessboard.",
    ),
    EntryPoint(
        "checkChessboard",
        (P("img", MAT_IN), P("size", SIZE)),
        Returns.BOOL,
        doc="Quick check whether an image may contain a chessboard.",
    ),
    EntryPoint(
        "findChessboardCornersSB",
        (
            P("image", MAT_IN),
            P("patternSize", SIZE),
            P("corners", MAT_OUT),
            P("flags", INT, 0),
        ),
        Returns.BOOL,
        doc="Sector-based chessboard corner detection.",
    ),
    EntryPoint(
        "findChessboardCornersSBWithMeta",
        (
            P("image", MAT_IN),
            P("patternSize", SIZE),
            P("corners", MAT_OUT),
            P("flags", INT),
            P("meta", MAT_OUT),
        ),
        Returns.BOOL,
        doc="Sector-based chessboard detection returning per-corner meta information.",
    ),
    EntryPoint(
        "estimateChessboardSharpness",
        (
            P("image", MAT_IN),
            P("patternSize", SIZE),
            P("corners", MAT_IN),
            P("rise_distance", FLOAT, 0.8),
            P("vertical", BOOL, False),
            P("sharpness", MAT_OUT, EMPTY),
        ),
        Returns.SCALAR,
        doc="Sharpness statistics of a detected chessboard.",
    ),
    EntryPoint(
        "find4QuadCornerSubpix",
        (P("img", MAT_IN), P("corners", MAT_INOUT), P("region_size", SIZE)),
        Returns.BOOL,
        doc="Refine chessboard corners to sub-pixel accuracy.",
    ),
    EntryPoint(
        "drawChessboardCorners",
        (
            P("image", MAT_INOUT),
            P("patternSize", SIZE),
            P("corners", POINTS2F),
            P("patternWasFound", BOOL),
        ),
        doc="Render detected chessboard corners.",
    ),
    EntryPoint(
        "drawFrameAxes",
        (
            P("image", MAT_INOUT),
            P("cameraMatrix", MAT_IN),
            P("distCoeffs", MAT_IN),
            P("rvec", MAT_IN),
            P("tvec", MAT_IN),
            P("length", FLOAT),
            P("thickness", INT, 3),
        ),
        doc="Draw the world/object coordinate axes from a pose.",
    ),
    EntryPoint(
        "findCirclesGrid",
        (
            P("image", MAT_IN),
            P("patternSize", SIZE),
            P("centers", MAT_OUT),
            P("flags", INT, CALIB_CB_SYMMETRIC_GRID),
        ),
        Returns.BOOL,
        doc="Find the centers of a circle grid.",
    ),
]


# ============================================================================
# Camera calibration
# ============================================================================

_CALIBRATION = [
    EntryPoint(
        "calibrateCamera",
        (
            P("objectPoints", MATS_IN),
            P("imagePoints", MATS_IN),
            P("imageSize", SIZE),
            P("cameraMatrix", MAT_INOUT),
            P("distCoeffs", MAT_INOUT),
            P("rvecs", MATS_OUT),
            P("tvecs", MATS_OUT),
            P("flags", INT, 0),
            P("criteria", TERM_CRITERIA, CALIBRATE_CRITERIA),
        ),
        Returns.DOUBLE,
        doc="Intrinsic and extrinsic parameters from several views; returns the RMS error.",
    ),
    EntryPoint(
        "calibrateCameraExtended",
        (
            P("objectPoints", MATS_IN),
            P("imagePoints", MATS_IN),
            P("imageSize", SIZE),
            P("cameraMatrix", MAT_INOUT),
            P("distCoeffs", MAT_INOUT),
            P("rvecs", MATS_OUT),
            P("tvecs", MATS_OUT),
            P("stdDeviationsIntrinsics", MAT_OUT),
            P("stdDeviationsExtrinsics", MAT_OUT),
            P("perViewErrors", MAT_OUT),
            P("flags", INT, 0),
            P("criteria", TERM_CRITERIA, CALIBRATE_CRITERIA),
        ),
        Returns.DOUBLE,
        doc="calibrateCamera that also estimates parameter deviations and per-view errors.",
    ),
    EntryPoint(
        "calibrateCameraRO",
        (
            P("objectPoints", MATS_IN),
            P("imagePoints", MATS_IN),
            P("imageSize", SIZE),
            P("iFixedPoint", INT),
            P("cameraMatrix", MAT_INOUT),
            P("distCoeffs", MAT_INOUT),
            P("rvecs", MATS_OUT),
            P("tvecs", MATS_OUT),
            P("newObjPoints", MAT_OUT),
            P("flags", INT, 0),
            P("criteria", TERM_CRITERIA, CALIBRATE_CRITERIA),
        ),
        Returns.DOUBLE,
        doc="Calibration with the object-releasing method (refines target points).",
    ),
    EntryPoint(
        "calibrationMatrixValues",
        (
            P("cameraMatrix", MAT_IN),
            P("imageSize", SIZE),
            P("apertureWidth", DOUBLE),
            P("apertureHeight", DOUBLE),
            P("fovx", DOUBLE_OUT),
            P("fovy", DOUBLE_OUT),
            P("focalLength", DOUBLE_OUT),
            P("principalPoint", POINT_OUT),
            P("aspectRatio", DOUBLE_OUT),
        ),
        doc="Useful camera characteristics from the camera matrix.",
    ),
    EntryPoint(
        "getOptimalNewCameraMatrix",
        (
            P("cameraMatrix", MAT_IN),
            P("distCoeffs", MAT_IN),
            P("imageSize", SIZE),
            P("alpha", DOUBLE),
            P("newImgSize", SIZE, NO_SIZE),
            P("validPixROI", RECT_OUT, EMPTY),
            P("centerPrincipalPoint", BOOL, False),
        ),
        Returns.MAT,
        doc="New camera matrix based on the free scaling parameter alpha.",
    ),
    EntryPoint(
        "calibrateHandEye",
        (
            P("R_gripper2base", MATS_IN),
            P("t_gripper2base", MATS_IN),
            P("R_target2cam", MATS_IN),
            P("t_target2cam", MATS_IN),
            P("R_cam2gripper", MAT_OUT),
            P("t_cam2gripper", MAT_OUT),
            P("method", INT, CALIB_HAND_EYE_TSAI),
        ),
        doc="Hand-eye calibration: camera pose relative to the gripper.",
    ),
    EntryPoint(
        "calibrateRobotWorldHandEye",
        (
            P("R_world2cam", MATS_IN),
            P("t_world2cam", MATS_IN),
            P("R_base2gripper", MATS_IN),
            P("t_base2gripper", MATS_IN),
            P("R_base2world", MAT_OUT),
            P("t_base2world", MAT_OUT),
            P("R_gripper2cam", MAT_OUT),
            P("t_gripper2cam", MAT_OUT),
            P("method", INT, CALIB_ROBOT_WORLD_HAND_EYE_SHAH),
        ),
        doc="Robot-world/hand-eye calibration.",
    ),
]


# ============================================================================
# Stereo and epipolar geometry
# ============================================================================

_STEREO = [
    EntryPoint(
        "stereoCalibrate",
        (
            P("objectPoints", MATS_IN),
            P("imagePoints1", MATS_IN),
            P("imagePoints2", MATS_IN),
            P("cameraMatrix1", MAT_INOUT),
            P("distCoeffs1", MAT_INOUT),
            P("cameraMatrix2", MAT_INOUT),
            P("distCoeffs2", MAT_INOUT),
            P("imageSize", SIZE),
            P("R", MAT_INOUT),
            P("T", MAT_INOUT),
            P("E", MAT_OUT),
            P("F", MAT_OUT),
            P("flags", INT, CALIB_FIX_INTRINSIC),
            P("criteria", TERM_CRITERIA, STEREO_CRITERIA),
        ),
        Returns.DOUBLE,
        doc="Calibrate a stereo pair; returns the RMS error.",
    ),
    EntryPoint(
        "stereoRectify",
        (
            P("cameraMatrix1", MAT_IN),
            P("distCoeffs1", MAT_IN),
            P("cameraMatrix2", MAT_IN),
            P("distCoeffs2", MAT_IN),
            P("imageSize", SIZE),
            P("R", MAT_IN),
            P("T", MAT_IN),
            P("R1", MAT_OUT),
            P("R2", MAT_OUT),
            P("P1", MAT_OUT),
            P("P2", MAT_OUT),
            P("Q", MAT_OUT),
            P("flags", INT, CALIB_ZERO_DISPARITY),
            P("alpha", DOUBLE, -1.0),
            P("newImageSize", SIZE, NO_SIZE),
            P("validPixROI1", RECT_OUT, EMPTY),
            P("validPixROI2", RECT_OUT, EMPTY),
        ),
        doc="Rectification transforms for a calibrated stereo pair.",
    ),
    EntryPoint(
        "stereoRectifyUncalibrated",
        (
            P("points1", POINTS2F),
            P("points2", POINTS2F),
            P("F", MAT_IN),
            P("imgSize", SIZE),
            P("H1", MAT_OUT),
            P("H2", MAT_OUT),
            P("threshold", DOUBLE, 5.0),
        ),
        Returns.BOOL,
        doc="Rectification homographies for an uncalibrated stereo pair.",
    ),
    EntryPoint(
        "findFundamentalMat",
        (
            P("points1", POINTS2F),
            P("points2", POINTS2F),
            P("method", INT, FM_RANSAC),
            P("ransacReprojThreshold", DOUBLE, 3.0),
            P("confidence", DOUBLE, 0.99),
            P("maxIters", INT, 1000),
            P("mask", MAT_OUT, EMPTY),
        ),
        Returns.MAT,
        doc="Fundamental matrix from corresponding points.",
    ),
    EntryPoint(
        "findEssentialMat",
        (
            P("points1", POINTS2F),
            P("points2", POINTS2F),
            P("cameraMatrix", MAT_IN),
            P("method", INT, RANSAC),
            P("prob", DOUBLE, 0.999),
            P("threshold", DOUBLE, 1.0),
            P("maxIters", INT, 1000),
            P("mask", MAT_OUT, EMPTY),
        ),
        Returns.MAT,
        doc="Essential matrix from corresponding points and a camera matrix.",
    ),
    EntryPoint(
        "findEssentialMatFocal",
        (
            P("points1", POINTS2F),
            P("points2", POINTS2F),
            P("focal", DOUBLE, 1.0),
            P("pp", POINT, (0.0, 0.0)),
            P("method", INT, RANSAC),
            P("prob", DOUBLE, 0.999),
            P("threshold", DOUBLE, 1.0),
            P("maxIters", INT, 1000),
            P("mask", MAT_OUT, EMPTY),
        ),
        Returns.MAT,
        native_name="findEssentialMat",
        ordinal=20,
        doc="Essential matrix from focal length and principal point.",
    ),
    EntryPoint(
        "decomposeEssentialMat",
        (P("E", MAT_IN), P("R1", MAT_OUT), P("R2", MAT_OUT), P("t", MAT_OUT)),
        doc="Decompose an essential matrix into possible rotations and translation.",
    ),
    EntryPoint(
        "recoverPose",
        (
            P("E", MAT_IN),
            P("points1", POINTS2F),
            P("points2", POINTS2F),
            P("cameraMatrix", MAT_IN),
            P("R", MAT_OUT),
            P("t", MAT_OUT),
            P("mask", MAT_INOUT, EMPTY),
        ),
        Returns.INT,
        doc="Relative pose from an essential matrix with cheirality check; returns inlier count.",
    ),
    EntryPoint(
        "computeCorrespondEpilines",
        (
            P("points", POINTS2F),
            P("whichImage", INT),
            P("F", MAT_IN),
            P("lines", MAT_OUT),
        ),
        doc="Epilines in one image for points in the other.",
    ),
    EntryPoint(
        "triangulatePoints",
        (
            P("projMatr1", MAT_IN),
            P("projMatr2", MAT_IN),
            P("projPoints1", MAT_IN),
            P("projPoints2", MAT_IN),
            P("points4D", MAT_OUT, name="points4d"),
        ),
        doc="Homogeneous 3D points from two views.",
    ),
    EntryPoint(
        "correctMatches",
        (
            P("F", MAT_IN),
            P("points1", MAT_IN),
            P("points2", MAT_IN),
            P("newPoints1", MAT_OUT),
            P("newPoints2", MAT_OUT),
        ),
        doc="Refine corresponding points to satisfy the epipolar constraint.",
    ),
    EntryPoint(
        "sampsonDistance",
        (P("pt1", MAT_IN), P("pt2", MAT_IN), P("F", MAT_IN)),
        Returns.DOUBLE,
        doc="Sampson distance between two points under a fundamental matrix.",
    ),
    EntryPoint(
        "convertPointsToHomogeneous",
        (P("src", MAT_IN), P("dst", MAT_OUT)),
    ),
    EntryPoint(
        "convertPointsFromHomogeneous",
        (P("src", MAT_IN), P("dst", MAT_OUT)),
    ),
]


# ============================================================================
# Disparity
# ============================================================================

_DISPARITY = [
    EntryPoint(
        "reprojectImageTo3D",
        (
            P("disparity", MAT_IN),
            P("_3dImage", MAT_OUT),
            P("Q", MAT_IN),
            P("handleMissingValues", BOOL, False),
            P("ddepth", INT, -1),
        ),
        doc="Reproject a disparity image to 3D space.",
    ),
    EntryPoint(
        "filterSpeckles",
        (
            P("img", MAT_INOUT),
            P("newVal", DOUBLE),
            P("maxSpeckleSize", INT),
            P("maxDiff", DOUBLE),
            P("buf", MAT_INOUT, EMPTY),
        ),
        doc="Filter small noise blobs in a disparity map.",
    ),
    EntryPoint(
        "getValidDisparityROI",
        (
            P("roi1", RECT),
            P("roi2", RECT),
            P("minDisparity", INT),
            P("numberOfDisparities", INT),
            P("blockSize", INT),
        ),
        Returns.RECT,
    ),
    EntryPoint(
        "validateDisparity",
        (
            P("disparity", MAT_INOUT),
            P("cost", MAT_IN),
            P("minDisparity", INT),
            P("numberOfDisparities", INT),
            P("disp12MaxDisp", INT, 1),
        ),
        doc="Left-right consistency check of a disparity map.",
    ),
]


# ============================================================================
# Affine and translation estimation, homography decomposition
# ============================================================================

_ESTIMATION = [
    EntryPoint(
        "estimateAffine2D",
        (
            P("from", POINTS2F),
            P("to", POINTS2F),
            P("inliers", MAT_OUT, EMPTY),
            P("method", INT, RANSAC),
            P("ransacReprojThreshold", DOUBLE, 3.0),
            P("maxIters", INT, 2000),
            P("confidence", DOUBLE, 0.99),
            P("refineIters", INT, 10),
        ),
        Returns.MAT,
        doc="Optimal 2D affine transformation between two point sets.",
    ),
    EntryPoint(
        "estimateAffinePartial2D",
        (
            P("from", POINTS2F),
            P("to", POINTS2F),
            P("inliers", MAT_OUT, EMPTY),
            P("method", INT, RANSAC),
            P("ransacReprojThreshold", DOUBLE, 3.0),
            P("maxIters", INT, 2000),
            P("confidence", DOUBLE, 0.99),
            P("refineIters", INT, 10),
        ),
        Returns.MAT,
        doc="Optimal limited (4 DOF) affine transformation.",
    ),
    EntryPoint(
        "estimateAffine3D",
        (
            P("src", MAT_IN),
            P("dst", MAT_IN),
            P("out", MAT_OUT),
            P("inliers", MAT_OUT),
            P("ransacThreshold", DOUBLE, 3.0),
            P("confidence", DOUBLE, 0.99),
        ),
        Returns.INT,
        doc="Optimal 3D affine transformation with RANSAC.",
    ),
    EntryPoint(
        "estimateTranslation3D",
        (
            P("src", MAT_IN),
            P("dst", MAT_IN),
            P("out", MAT_OUT),
            P("inliers", MAT_OUT),
            P("ransacThreshold", DOUBLE, 3.0),
            P("confidence", DOUBLE, 0.99),
        ),
        Returns.INT,
        doc="Optimal 3D translation with RANSAC.",
    ),
    EntryPoint(
        "decomposeHomographyMat",
        (
            P("H", MAT_IN),
            P("K", MAT_IN),
            P("rotations", MATS_OUT),
            P("translations", MATS_OUT),
            P("normals", MATS_OUT),
        ),
        Returns.INT,
        doc="Rotation, translation and plane-normal hypotheses of a homography.",
    ),
    EntryPoint(
        "filterHomographyDecompByVisibleRefpoints",
        (
            P("rotations", MATS_IN),
            P("normals", MATS_IN),
            P("beforePoints", MAT_IN),
            P("afterPoints", MAT_IN),
            P("possibleSolutions", MAT_OUT),
            P("pointsMask", MAT_IN, EMPTY),
        ),
        doc="Keep homography decompositions consistent with visible reference points.",
    ),
]


# ============================================================================
# Undistortion (pinhole)
# ============================================================================

_UNDISTORT = [
    EntryPoint(
        "undistort",
        (
            P("src", MAT_IN),
            P("dst", MAT_OUT),
            *_CAMERA,
            P("newCameraMatrix", MAT_IN, EMPTY),
        ),
        doc="Compensate an image for lens distortion.",
    ),
    EntryPoint(
        "initUndistortRectifyMap",
        (
            P("cameraMatrix", MAT_IN),
            P("distCoeffs", MAT_IN),
            P("R", MAT_IN),
            P("newCameraMatrix", MAT_IN),
            P("size", SIZE),
            P("m1type", INT),
            P("map1", MAT_OUT),
            P("map2", MAT_OUT),
        ),
        doc="Undistortion and rectification maps for remap.",
    ),
    EntryPoint(
        "initInverseRectificationMap",
        (
            P("cameraMatrix", MAT_IN),
            P("distCoeffs", MAT_IN),
            P("R", MAT_IN),
            P("newCameraMatrix", MAT_IN),
            P("size", SIZE),
            P("m1type", INT),
            P("map1", MAT_OUT),
            P("map2", MAT_OUT),
        ),
        doc="Maps for projecting rectified images back to the distorted camera view.",
    ),
    EntryPoint(
        "getDefaultNewCameraMatrix",
        (
            P("cameraMatrix", MAT_IN),
            P("imgsize", SIZE, NO_SIZE),
            P("centerPrincipalPoint", BOOL, False),
        ),
        Returns.MAT,
    ),
    EntryPoint(
        "undistortPoints",
        (
            P("src", POINTS2F),
            P("dst", POINTS2F_OUT),
            *_CAMERA,
            P("R", MAT_IN, EMPTY),
            P("P", MAT_IN, EMPTY),
        ),
        doc="Ideal point coordinates from observed ones.",
    ),
    EntryPoint(
        "undistortPointsIter",
        (
            P("src", POINTS2F),
            P("dst", POINTS2F_OUT),
            P("cameraMatrix", MAT_IN),
            P("distCoeffs", MAT_IN),
            P("R", MAT_IN),
            P("P", MAT_IN),
            P("criteria", TERM_CRITERIA, UNDISTORT_CRITERIA),
        ),
        doc="undistortPoints with explicit termination criteria.",
    ),
]


# ============================================================================
# Fisheye model
# ============================================================================

_FISHEYE = [
    EntryPoint(
        "fisheye_projectPoints",
        (
            P("objectPoints", POINTS3F),
            P("imagePoints", POINTS2F_OUT),
            P("rvec", MAT_IN),
            P("tvec", MAT_IN),
            P("K", MAT_IN),
            P("D", MAT_IN),
            P("alpha", DOUBLE, 0.0),
            P("jacobian", MAT_OUT, EMPTY),
        ),
        doc="Project points with the fisheye model.",
    ),
    EntryPoint(
        "fisheye_distortPoints",
        (
            P("undistorted", MAT_IN),
            P("distorted", MAT_OUT),
            P("K", MAT_IN),
            P("D", MAT_IN),
            P("alpha", DOUBLE, 0.0),
        ),
    ),
    EntryPoint(
        "fisheye_undistortPoints",
        (
            P("distorted", MAT_IN),
            P("undistorted", MAT_OUT),
            P("K", MAT_IN),
            P("D", MAT_IN),
            P("R", MAT_IN, EMPTY),
            P("P", MAT_IN, EMPTY),
        ),
    ),
    EntryPoint(
        "fisheye_initUndistortRectifyMap",
        (
            P("K", MAT_IN),
            P("D", MAT_IN),
            P("R", MAT_IN),
            P("P", MAT_IN),
            P("size", SIZE),
            P("m1type", INT),
            P("map1", MAT_OUT),
            P("map2", MAT_OUT),
        ),
    ),
    EntryPoint(
        "fisheye_undistortImage",
        (
            P("distorted", MAT_IN),
            P("undistorted", MAT_OUT),
            P("K", MAT_IN),
            P("D", MAT_IN),
            P("Knew", MAT_IN, EMPTY),
            P("new_size", SIZE, NO_SIZE),
        ),
        doc="Undistort an image captured with a fisheye lens.",
    ),
    EntryPoint(
        "fisheye_estimateNewCameraMatrixForUndistortRectify",
        (
            P("K", MAT_IN),
            P("D", MAT_IN),
            P("image_size", SIZE),
            P("R", MAT_IN),
            P("P", MAT_OUT),
            P("balance", DOUBLE, 0.0),
            P("new_size", SIZE, NO_SIZE),
            P("fov_scale", DOUBLE, 1.0),
        ),
    ),
    EntryPoint(
        "fisheye_calibrate",
        (
            P("objectPoints", MATS_IN),
            P("imagePoints", MATS_IN),
            P("image_size", SIZE),
            P("K", MAT_INOUT),
            P("D", MAT_INOUT),
            P("rvecs", MATS_OUT),
            P("tvecs", MATS_OUT),
            P("flags", INT, 0),
            P("criteria", TERM_CRITERIA, FISHEYE_CRITERIA),
        ),
        Returns.DOUBLE,
        doc="Fisheye camera calibration; returns the RMS error.",
    ),
    EntryPoint(
        "fisheye_stereoRectify",
        (
            P("K1", MAT_IN),
            P("D1", MAT_IN),
            P("K2", MAT_IN),
            P("D2", MAT_IN),
            P("imageSize", SIZE),
            P("R", MAT_IN),
            P("tvec", MAT_IN),
            P("R1", MAT_OUT),
            P("R2", MAT_OUT),
            P("P1", MAT_OUT),
            P("P2", MAT_OUT),
            P("Q", MAT_OUT),
            P("flags", INT),
            P("newImageSize", SIZE, NO_SIZE),
            P("balance", DOUBLE, 0.0),
            P("fov_scale", DOUBLE, 1.0),
        ),
    ),
    EntryPoint(
        "fisheye_stereoCalibrate",
        (
            P("objectPoints", MATS_IN),
            P("imagePoints1", MATS_IN),
            P("imagePoints2", MATS_IN),
            P("K1", MAT_INOUT),
            P("D1", MAT_INOUT),
            P("K2", MAT_INOUT),
            P("D2", MAT_INOUT),
            P("imageSize", SIZE),
            P("R", MAT_OUT),
            P("T", MAT_OUT),
            P("flags", INT, CALIB_FIX_INTRINSIC),
            P("criteria", TERM_CRITERIA, FISHEYE_CRITERIA),
        ),
        Returns.DOUBLE,
    ),
]


# ============================================================================
# Core helpers used alongside calib3d
# ============================================================================

_CORE = [
    EntryPoint(
        "perspectiveTransform",
        (P("src", MAT_IN), P("dst", MAT_OUT), P("m", MAT_IN)),
        module="core",
        class_name="Core",
        doc="Apply a perspective matrix to a set of points.",
    ),
]


ENTRY_POINTS = EntryPointTable(
    _GEOMETRY + _POSE + _PATTERNS + _CALIBRATION + _STEREO
    + _DISPARITY + _ESTIMATION + _UNDISTORT + _FISHEYE + _CORE
)
