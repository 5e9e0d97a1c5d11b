from __future__ import annotations
import argparse, json
from pathlib import Path

import pandas as pd

from .config import EXPERIMENTS, SweepConfig, get_experiment
from .data import GROUP_A, GROUP_B, LABEL_COL, SamplePool, load_pool_csv, simulate_gaussian_groups
from .evaluate import plot_sweep_curve
from .sweep import run_experiment


def parse_args(argv=None):
    p = argparse.ArgumentParser(description='Classifier performance under a sweep from balanced to imbalanced groups, with optional minority augmentation')
    p.add_argument('--experiment', type=str, default=None, choices=sorted(EXPERIMENTS),
                   help='Named preset; explicit flags below override it')
    p.add_argument('--data', type=str, default=None, help='CSV with feature columns and a label column; simulated if omitted')
    p.add_argument('--label-col', type=str, default=LABEL_COL)
    p.add_argument('--group-a', type=str, default=GROUP_A, help='Label of the group that shrinks across the sweep')
    p.add_argument('--group-b', type=str, default=GROUP_B, help='Label of the group that grows across the sweep (positive class)')
    # Simulated data
    p.add_argument('--sim-group-a', type=int, default=600)
    p.add_argument('--sim-group-b', type=int, default=1000)
    p.add_argument('--sim-features', type=int, default=10)
    p.add_argument('--sim-separation', type=float, default=1.0)
    # Sweep
    p.add_argument('--outer-trials', type=int, default=None)
    p.add_argument('--configs', type=int, default=None)
    p.add_argument('--initial-pool-size', type=int, default=None)
    p.add_argument('--step-size', type=int, default=None)
    p.add_argument('--initial-test-size', type=int, default=None)
    p.add_argument('--synthetic-multiplier', type=int, default=None)
    p.add_argument('--augment', type=str, default=None,
                   choices=['none', 'oversample', 'smote', 'kernel', 'kernel-replace-both'])
    p.add_argument('--classifier', type=str, default=None, choices=['logistic', 'forest', 'xgboost'])
    p.add_argument('--seed', type=int, default=None)
    p.add_argument('--seed-policy', type=str, default=None, choices=['run', 'trial'],
                   help="'run' seeds once per sweep, 'trial' seeds every (outer trial, configuration) separately")
    # Strategy parameters
    p.add_argument('--k-neighbors', type=int, default=None, help='SMOTE neighbours')
    p.add_argument('--kernel-pool-size', type=int, default=None, help='Size of the kernel-smoothed synthetic pool')
    p.add_argument('--replace-from-idx', type=int, default=None, help='First configuration where kernel-replace-both applies')
    p.add_argument('--max-iter', type=int, default=None, help='Logistic regression iteration cap')
    p.add_argument('--n-estimators', type=int, default=None, help='Trees in the ensemble classifier')
    p.add_argument('--output-root', type=str, default='outputs')
    p.add_argument('--no-plots', action='store_true', help='Disable the sweep curve plot')
    p.add_argument('--quiet', action='store_true')
    return p.parse_args(argv)


def build_config(args) -> SweepConfig:
    params = get_experiment(args.experiment) if args.experiment else {}
    overrides = {
        'num_outer_trials': args.outer_trials,
        'num_configs': args.configs,
        'initial_pool_size': args.initial_pool_size,
        'step_size': args.step_size,
        'initial_test_size': args.initial_test_size,
        'synthetic_multiplier': args.synthetic_multiplier,
        'augmentation': args.augment,
        'classifier': args.classifier,
        'random_seed': args.seed,
        'seed_policy': args.seed_policy,
    }
    params.update({k: v for k, v in overrides.items() if v is not None})

    aug_params = dict(params.get('augmentation_params', {}))
    augmentation = params.get('augmentation', 'none')
    if args.k_neighbors is not None and augmentation == 'smote':
        aug_params['k_neighbors'] = args.k_neighbors
    if args.kernel_pool_size is not None and augmentation == 'kernel':
        aug_params['pool_size'] = args.kernel_pool_size
    if args.replace_from_idx is not None and augmentation == 'kernel-replace-both':
        aug_params['start_idx'] = args.replace_from_idx
    params['augmentation_params'] = aug_params

    clf_params = dict(params.get('classifier_params', {}))
    classifier = params.get('classifier', 'logistic')
    if args.max_iter is not None and classifier == 'logistic':
        clf_params['max_iter'] = args.max_iter
    if args.n_estimators is not None and classifier in ('forest', 'xgboost'):
        clf_params['n_estimators'] = args.n_estimators
    params['classifier_params'] = clf_params
    return SweepConfig(**params)


def create_output_dir(config: SweepConfig, root='outputs') -> Path:
    """Create organized output directory based on parameters"""
    dir_parts = [
        f"clf_{config.classifier}",
        f"aug_{config.augmentation}",
        f"mult_{config.synthetic_multiplier}",
        f"trials_{config.num_outer_trials}",
        f"configs_{config.num_configs}",
        f"seed_{config.random_seed}_{config.seed_policy}",
    ]
    output_dir = Path(root) / '_'.join(dir_parts)
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def match_label_dtype(label, column: pd.Series):
    """Command-line labels are text; a numeric label column needs them as numbers."""
    if pd.api.types.is_numeric_dtype(column) and not pd.api.types.is_bool_dtype(column):
        try:
            return pd.to_numeric(pd.Series([label])).astype(column.dtype).iloc[0]
        except (TypeError, ValueError) as err:
            raise ValueError(f"Label {label!r} does not match the {column.dtype} column '{column.name}'") from err
    return label


def load_pool(args) -> SamplePool:
    group_a, group_b = args.group_a, args.group_b
    if args.data:
        df = load_pool_csv(args.data, label_col=args.label_col)
        group_a = match_label_dtype(group_a, df[args.label_col])
        group_b = match_label_dtype(group_b, df[args.label_col])
    else:
        df = simulate_gaussian_groups(
            n_group_a=args.sim_group_a,
            n_group_b=args.sim_group_b,
            n_features=args.sim_features,
            separation=args.sim_separation,
            random_state=args.seed if args.seed is not None else 42,
        )
    return SamplePool.from_frame(df, label_col=args.label_col, group_a_label=group_a, group_b_label=group_b)


def main(argv=None):
    args = parse_args(argv)
    config = build_config(args)
    verbose = not args.quiet

    output_dir = create_output_dir(config, root=args.output_root)
    if verbose:
        print("Starting imbalance sweep...")
        print(f"Output directory: {output_dir}")
        print("Configuration:")
        print(f"   - Classifier: {config.classifier}")
        print(f"   - Augmentation: {config.augmentation}")
        print(f"   - Outer trials: {config.num_outer_trials}")
        print(f"   - Configurations: {config.num_configs}")
        print(f"   - Pool window / step / test size: {config.initial_pool_size} / {config.step_size} / {config.initial_test_size}")
        print(f"   - Synthetic multiplier: {config.synthetic_multiplier}")
        print(f"   - Seed: {config.random_seed} ({config.seed_policy})")

    pool = load_pool(args)
    if verbose:
        print(f"\nSample pool: {len(pool.group_a_indices)} GroupA ({args.group_a}), "
              f"{len(pool.group_b_indices)} GroupB ({args.group_b}), {len(pool.feature_columns)} features")

    raw, averaged = run_experiment(pool, config, verbose=verbose)

    raw.to_csv(output_dir / 'raw.csv', index=False)
    averaged.to_csv(output_dir / 'averaged.csv', index=False)
    with open(output_dir / 'config.json', 'w') as f:
        json.dump({
            **config.to_dict(),
            'data': args.data or 'simulated',
            'group_a_pool_n': int(len(pool.group_a_indices)),
            'group_b_pool_n': int(len(pool.group_b_indices)),
        }, f, indent=2)
    if not args.no_plots:
        plot_sweep_curve(averaged, out_dir=output_dir,
                         title=f"{config.classifier} / {config.augmentation}")

    if verbose:
        first, last = averaged.iloc[0], averaged.iloc[-1]
        print(f"\nResults saved to: {output_dir}")
        print("Key Metrics (first -> last configuration):")
        print(f"   - GroupA share: {first['percent_group_a_of_total']:.1f}% -> {last['percent_group_a_of_total']:.1f}%")
        print(f"   - AUC: {first['auc']:.4f} -> {last['auc']:.4f}")
        print(f"   - GroupA correct: {first['percent_group_a_correct']:.1f}% -> {last['percent_group_a_correct']:.1f}%")
        print(f"   - GroupB correct: {first['percent_group_b_correct']:.1f}% -> {last['percent_group_b_correct']:.1f}%")
    return raw, averaged


if __name__ == '__main__':
    main()
