"""
Pie charts of categorical composition

Draws one pie for a single categorical column, a row of pies when faceted by
a second column, or a grid of pies when faceted by two columns. Slices count
rows, or sum a numeric column (interval widths are summed in kb).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import logging

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.figure import Figure
from matplotlib.patches import Patch, Wedge

from .config import PieConfig
from .errors import ConfigurationError
from .ranges import is_interval_frame

logger = logging.getLogger(__name__)


@dataclass
class PieResult:
    """
    Data behind a pie chart

    Attributes:
        data: One row per slice (every combination of levels, zero-filled)
            with value, p, label_radians, N, r and facet positions
        fill: Column defining slices
        x: Column defining pie columns, if any
        y: Column defining pie rows, if any
        figure: Rendered figure, None until plotted
    """
    data: pd.DataFrame
    fill: str
    x: Optional[str] = None
    y: Optional[str] = None
    figure: Optional[Figure] = None

    @property
    def facets(self) -> List[str]:
        return [c for c in (self.x, self.y) if c is not None]

    @property
    def totals(self) -> pd.Series:
        """Total value per pie"""
        if not self.facets:
            return pd.Series([self.data['value'].sum()], name='N')
        return self.data.groupby(self.facets, observed=False)['value'].sum().rename('N')


def _as_categorical(values: pd.Series) -> pd.Series:
    # Levels in first-seen order unless already categorical
    if isinstance(values.dtype, pd.CategoricalDtype):
        return values.cat.remove_unused_categories()
    levels = pd.unique(values.dropna())
    return pd.Categorical(values, categories=levels)


class PiePlotter:
    """
    Summarises and draws categorical composition as pie charts
    """

    def __init__(self, config: Optional[PieConfig] = None) -> None:
        self.config: PieConfig = config or PieConfig()

    def _validate(
        self,
        data: pd.DataFrame,
        fill: Optional[str],
        x: Optional[str],
        y: Optional[str],
        scale_by: Optional[str]
    ) -> None:
        if not isinstance(data, pd.DataFrame):
            raise ConfigurationError("Pie charts require a DataFrame or interval DataFrame")
        if fill is None:
            raise ConfigurationError("The initial category must be defined as fill")
        for arg, col in (('fill', fill), ('x', x), ('y', y), ('scale_by', scale_by)):
            if col is not None and col not in data.columns:
                raise ConfigurationError(f"Couldn't find column '{col}' given as {arg}")
        if y is not None and x is None:
            raise ConfigurationError("y can only be used together with x")
        if len({c for c in (fill, x, y) if c is not None}) != len([c for c in (fill, x, y) if c is not None]):
            raise ConfigurationError("fill, x and y must be different columns")
        if scale_by is not None and (
            not pd.api.types.is_numeric_dtype(data[scale_by])
            or pd.api.types.is_bool_dtype(data[scale_by])
        ):
            raise ConfigurationError(f"{scale_by} must contain numeric values")

    def compute(
        self,
        data: pd.DataFrame,
        fill: Optional[str] = None,
        x: Optional[str] = None,
        y: Optional[str] = None,
        scale_by: Optional[str] = None
    ) -> PieResult:
        """
        Summarise slice values without drawing

        Args:
            data: DataFrame, or interval DataFrame (which gains a 'width' column)
            fill: Column defining the slices
            x: Optional column splitting pies horizontally
            y: Optional column splitting pies vertically
            scale_by: Optional numeric column summed instead of counting rows

        Returns:
            PieResult with figure set to None
        """
        frame = data.copy() if isinstance(data, pd.DataFrame) else data
        intervals = is_interval_frame(frame)
        if intervals and 'width' not in frame.columns:
            frame['width'] = frame['end'] - frame['start']
        self._validate(frame, fill, x, y, scale_by)

        facets = [c for c in (x, y) if c is not None]
        cats = [fill] + facets
        for col in cats:
            frame[col] = _as_categorical(frame[col])

        if scale_by is None:
            frame['_weight'] = 1.0
        else:
            frame['_weight'] = frame[scale_by].astype(float)
            if intervals and scale_by == 'width':
                frame['_weight'] = frame['_weight'] / 1e3

        summary = (
            frame.groupby(cats, observed=False)['_weight'].sum()
            .rename('value').reset_index()
        )

        if facets:
            by_pie = summary.groupby(facets, observed=False)['value']
            summary['N'] = by_pie.transform('sum')
        else:
            summary['N'] = summary['value'].sum()
        summary['p'] = np.where(summary['N'] > 0, summary['value'] / summary['N'].where(summary['N'] > 0, 1), 0.0)

        if facets:
            cum = summary.groupby(facets, observed=False)['p'].cumsum()
        else:
            cum = summary['p'].cumsum()
        summary['label_radians'] = 2 * np.pi * (cum - summary['p'] / 2)

        max_n = summary['N'].max() if len(summary) else 0
        scale = np.sqrt(summary['N'] / max_n) if max_n > 0 else 0.0
        summary['r'] = scale * self.config.width / 2
        if x is not None:
            summary['x_pos'] = summary[x].cat.codes.astype(int) + 1
        if y is not None:
            summary['y_pos'] = summary[y].cat.codes.astype(int) + 1

        columns = cats + ['value', 'p', 'label_radians', 'N', 'r']
        columns += [c for c in ('x_pos', 'y_pos') if c in summary.columns]
        logger.debug(f"Pie summary: {len(summary)} slices across {len(facets)} facet column(s)")
        return PieResult(data=summary[columns], fill=fill, x=x, y=y)

    def plot(
        self,
        data: pd.DataFrame,
        fill: Optional[str] = None,
        x: Optional[str] = None,
        y: Optional[str] = None,
        scale_by: Optional[str] = None,
        output_file: Optional[str] = None,
        dpi: int = 300
    ) -> PieResult:
        """
        Summarise and draw pie charts

        Example:
            >>> result = PiePlotter().plot(df, fill='feature', x='TF1')
        """
        result = self.compute(data, fill=fill, x=x, y=y, scale_by=scale_by)
        result.figure = self._draw(result)
        if output_file is not None:
            result.figure.savefig(output_file, dpi=dpi, bbox_inches='tight')
            logger.info(f"Saved pie chart: {output_file}")
        return result

    def _colors(self, levels: List[str]) -> dict:
        palette = self.config.palette
        if palette:
            return {lvl: palette[i % len(palette)] for i, lvl in enumerate(levels)}
        cmap = plt.get_cmap('tab10')
        return {lvl: cmap(i % cmap.N) for i, lvl in enumerate(levels)}

    def _draw(self, result: PieResult) -> Figure:
        cfg = self.config
        df = result.data
        levels = list(df[result.fill].cat.categories)
        colors = self._colors(levels)
        n_x = int(df['x_pos'].max()) if 'x_pos' in df.columns and len(df) else 1
        n_y = int(df['y_pos'].max()) if 'y_pos' in df.columns and len(df) else 1

        figsize = cfg.figure_size or (2.5 * n_x + 2, 2.5 * n_y + 0.5)
        fig, ax = plt.subplots(figsize=figsize)

        keys = result.facets
        pies = df.groupby(keys, observed=False) if keys else [((), df)]
        for _, slices in pies:
            if slices.empty:
                continue
            cx = float(slices['x_pos'].iloc[0]) if 'x_pos' in slices.columns else 1.0
            cy = float(slices['y_pos'].iloc[0]) if 'y_pos' in slices.columns else 1.0
            radius = float(slices['r'].iloc[0])
            total = float(slices['N'].iloc[0])
            start = 0.0
            for _, row in slices.iterrows():
                if row['p'] <= 0:
                    continue
                end = start + row['p']
                # Clockwise from 12 o'clock
                ax.add_patch(Wedge(
                    (cx, cy), radius, 90 - 360 * end, 90 - 360 * start,
                    facecolor=colors[row[result.fill]], edgecolor='white', linewidth=0.5
                ))
                if cfg.show_category and not keys and row['p'] >= cfg.min_p:
                    angle = row['label_radians']
                    ax.text(
                        cx + 0.65 * radius * np.sin(angle), cy + 0.65 * radius * np.cos(angle),
                        f"{row[result.fill]}\n{row['p']:.0%}",
                        ha='center', va='center', fontsize=cfg.category_size
                    )
                start = end
            if cfg.show_total:
                ax.text(
                    cx + radius * 0.75, cy + radius * 0.75, f"{total:,.0f}",
                    ha='left', va='bottom', fontsize=cfg.total_size
                )

        ax.set_xlim(0.5, n_x + 0.5)
        ax.set_ylim(0.5, n_y + 0.5)
        ax.set_aspect('equal')
        if result.x is not None:
            ax.set_xticks(range(1, n_x + 1))
            ax.set_xticklabels(list(df[result.x].cat.categories))
            ax.set_xlabel(result.x)
        else:
            ax.set_xticks([])
        if result.y is not None:
            ax.set_yticks(range(1, n_y + 1))
            ax.set_yticklabels(list(df[result.y].cat.categories))
            ax.set_ylabel(result.y)
        else:
            ax.set_yticks([])
        for spine in ax.spines.values():
            spine.set_visible(False)

        handles = [Patch(facecolor=colors[lvl], label=str(lvl)) for lvl in levels]
        ax.legend(handles=handles, title=result.fill, loc='center left',
                  bbox_to_anchor=(1.02, 0.5), frameon=False)
        return fig


def plot_pie(
    data: pd.DataFrame,
    fill: Optional[str] = None,
    x: Optional[str] = None,
    y: Optional[str] = None,
    scale_by: Optional[str] = None,
    config: Optional[PieConfig] = None,
    output_file: Optional[str] = None
) -> PieResult:
    """
    Convenience function to draw composition pie charts

    Args:
        data: DataFrame, or interval DataFrame
        fill: Column defining the slices
        x: Optional column splitting pies horizontally
        y: Optional column splitting pies vertically (requires x)
        scale_by: Optional numeric column summed instead of counting rows
        config: Pie configuration
        output_file: Optional path to save the figure

    Returns:
        PieResult with the rendered figure
    """
    return PiePlotter(config).plot(
        data, fill=fill, x=x, y=y, scale_by=scale_by, output_file=output_file
    )
