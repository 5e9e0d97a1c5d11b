#!/usr/bin/env python3
"""
Imbalance Sweep Experiment Runner
Runs every preset experiment and compares their performance curves
"""

import argparse
import json
import subprocess
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns

from imbalance_sweep.config import EXPERIMENTS


def run_experiment(cmd, description):
    """Run a single experiment"""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print(f"{'='*60}")

    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode == 0:
        print("Experiment completed successfully")
        return True
    print(f"Experiment failed: {result.stderr}")
    return False


def collect_results(outputs_dir):
    """Collect averaged tables from every experiment directory"""
    frames = []
    outputs_dir = Path(outputs_dir)
    if not outputs_dir.exists():
        print("No outputs directory found")
        return pd.DataFrame()

    for exp_dir in sorted(outputs_dir.iterdir()):
        config_file = exp_dir / 'config.json'
        averaged_file = exp_dir / 'averaged.csv'
        if not (exp_dir.is_dir() and config_file.exists() and averaged_file.exists()):
            continue
        with open(config_file, 'r') as f:
            config = json.load(f)
        averaged = pd.read_csv(averaged_file)
        averaged['experiment_dir'] = exp_dir.name
        averaged['classifier'] = config['classifier']
        averaged['augmentation'] = config['augmentation']
        frames.append(averaged)

    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


def create_comparison_report(df, report_dir):
    """Summary table and curves across experiments"""
    report_dir = Path(report_dir)
    report_dir.mkdir(parents=True, exist_ok=True)
    df.to_csv(report_dir / 'all_results.csv', index=False)

    # Balanced end vs. most imbalanced end of each sweep
    rows = []
    for name, gdf in df.groupby('experiment_dir'):
        gdf = gdf.sort_values('idx')
        first, last = gdf.iloc[0], gdf.iloc[-1]
        rows.append({
            'experiment_dir': name,
            'classifier': first['classifier'],
            'augmentation': first['augmentation'],
            'auc_balanced': first['auc'],
            'auc_imbalanced': last['auc'],
            'auc_drop': first['auc'] - last['auc'],
            'group_a_correct_imbalanced': last['percent_group_a_correct'],
            'group_b_correct_imbalanced': last['percent_group_b_correct'],
            'degraded_trials': int(gdf[[c for c in gdf.columns if c.startswith('n_') and c != 'n_trials']].sum().sum()),
        })
    summary_df = pd.DataFrame(rows).sort_values('auc_drop')
    summary_df.to_csv(report_dir / 'summary.csv', index=False)

    create_comparison_plots(df, report_dir)

    print(f"\n{'='*80}")
    print("IMBALANCE SWEEP COMPARISON SUMMARY")
    print(f"{'='*80}")
    print(f"Total experiments: {len(summary_df)}")
    print(f"Report saved to: {report_dir}")
    print("\nSmallest AUC drop from balanced to most imbalanced:")
    print("-" * 80)
    for i, row in enumerate(summary_df.head().itertuples(), start=1):
        print(f"{i}. {row.classifier} / {row.augmentation}: AUC {row.auc_balanced:.4f} -> {row.auc_imbalanced:.4f}")
    return summary_df


def create_comparison_plots(df, report_dir):
    """AUC and per-group accuracy curves, one line per augmentation, line style per classifier"""
    plt.style.use('default')
    fig, axes = plt.subplots(1, 3, figsize=(20, 6))
    fig.suptitle('Imbalance Sweep Comparison', fontsize=16, fontweight='bold')

    panels = [
        ('auc', 'AUC'),
        ('percent_group_a_correct', 'GroupA correct (%)'),
        ('percent_group_b_correct', 'GroupB correct (%)'),
    ]
    for ax, (metric, label) in zip(axes, panels):
        sns.lineplot(data=df, x='percent_group_a_of_total', y=metric, hue='augmentation',
                     style='classifier', ax=ax)
        ax.set_xlabel('GroupA share of data (%)')
        ax.set_ylabel(label)
        ax.invert_xaxis()
        ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(Path(report_dir) / 'sweep_comparison_plots.png', dpi=300, bbox_inches='tight')
    plt.close()
    print(f"Comparison plots saved to: {Path(report_dir) / 'sweep_comparison_plots.png'}")


def main():
    p = argparse.ArgumentParser(description='Run all preset imbalance sweeps and compare them')
    p.add_argument('--experiments', nargs='*', default=sorted(EXPERIMENTS))
    p.add_argument('--outer-trials', type=int, default=10)
    p.add_argument('--configs', type=int, default=80)
    p.add_argument('--seed', type=int, default=42)
    p.add_argument('--output-root', type=str, default='outputs/sweeps')
    args = p.parse_args()

    print("Imbalance Sweep - Experiment Runner")
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    successful = 0
    for name in args.experiments:
        cmd = [sys.executable, '-m', 'imbalance_sweep.train', '--experiment', name,
               '--outer-trials', str(args.outer_trials), '--configs', str(args.configs),
               '--seed', str(args.seed), '--output-root', args.output_root, '--quiet']
        if run_experiment(cmd, name):
            successful += 1
    print(f"\nExperiment Summary: {successful}/{len(args.experiments)} completed successfully")

    print("\nCollecting and comparing results...")
    df = collect_results(args.output_root)
    if not df.empty:
        create_comparison_report(df, Path(args.output_root) / 'comparison_report')

    print(f"\nCompleted at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")


if __name__ == '__main__':
    main()
