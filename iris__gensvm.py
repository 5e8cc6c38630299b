from datetime import datetime
import logging
import os

import joblib
import matplotlib
matplotlib.use('Agg')
from sklearn.metrics import classification_report
from sklearn.model_selection import train_test_split
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from majsvm.data import Data, from_arrays, get_data
from majsvm.helpers import setup_logging, log_eval_stats, plot_weight_matrices
from majsvm.io import write_model, write_predictions
from majsvm.kernels import KernelType
from majsvm.models import GenSVMClassifier, Weights


################ CONFIGURATION ################
DATASET = Data.IRIS
KERNEL = KernelType.LINEAR
WEIGHTS = Weights.UNIT
P = 1.0
LAMBDA = 2 ** -8
KAPPA = 0.0
EPSILON = 1e-6
N_SPLITS = 5
###############################################


RESULTS_DIR = f"{DATASET.value}/{KERNEL.value}/{WEIGHTS.value}/{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}"

os.makedirs(f"{RESULTS_DIR}/images", exist_ok=True)
os.makedirs(f"{RESULTS_DIR}/models", exist_ok=True)

setup_logging(log_file=f"{RESULTS_DIR}/logs.log")

logging.info(RESULTS_DIR)
logging.info("=" * 40)
X, y = get_data(DATASET)

X_train, X_test, y_train, y_test = train_test_split(X, y, test_size=0.2, random_state=42, stratify=y)

pipeline = Pipeline([
    ('scaler', StandardScaler()),
    ('gensvm', GenSVMClassifier(
        p=P,
        lambda_=LAMBDA,
        kappa=KAPPA,
        epsilon=EPSILON,
        weights=WEIGHTS.value,
        kernel=KERNEL.value,
        random_state=42,
        verbose=True))
])
pipeline.fit(X_train, y_train)

joblib.dump(pipeline, f"{RESULTS_DIR}/models/gensvm_pipeline.pkl")

y_pred = pipeline.predict(X_test)

logging.info("\nClassification Report:")
logging.info(classification_report(y_test, y_pred))

model = pipeline.named_steps['gensvm'].model_
model.data_file = DATASET.value
write_model(model, f"{RESULTS_DIR}/models/gensvm.model")
write_predictions(from_arrays(X_test), y_pred, f"{RESULTS_DIR}/predictions.txt")

if KERNEL == KernelType.LINEAR:
    plot_weight_matrices(model.V, display=False, title="GenSVM weights",
                         save_path=f"{RESULTS_DIR}/images/weights.png")

log_eval_stats(X, y, pipeline, n_splits=N_SPLITS)
