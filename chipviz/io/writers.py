"""
I/O Writers

Handles writing of computed overlap tables.
"""

from pathlib import Path
import logging

logger = logging.getLogger(__name__)


class GroupWriter:
    """Writes intersection groups in TSV format"""

    def write(self, result, output_file):
        """
        Write one row per intersection group

        Args:
            result: OverlapResult from OverlapPlotter
            output_file: Path to output TSV file
        """
        if result.groups.empty:
            logger.warning("No intersection groups to save")
            return

        Path(output_file).parent.mkdir(parents=True, exist_ok=True)
        groups = result.groups.copy()
        for name in result.set_names:
            groups[name] = groups[name].astype(int)
        groups.to_csv(output_file, sep='\t', index=False, float_format='%.4f')
        logger.info(f"Wrote {len(groups)} intersection groups to {output_file}")


def write_groups(result, output_file):
    """
    Convenience function to write intersection groups
    """
    GroupWriter().write(result, output_file)
