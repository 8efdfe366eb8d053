# Copyright 2026 azmp Authors. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Registry of the generators that templates can call by name.

Helper names are '<namespace>:<name>', e.g. 'availability:set' or
'scale:lb.probe'. Helpers that produce objects return them as indented JSON
text ready to be embedded in a template; scalar results are returned as is.
"""

import dataclasses
import json
import logging

from azmp import arm_util
from azmp import availability
from azmp import errors
from azmp import recovery
from azmp.availability import availability_sets
from azmp.availability import availability_zones
from azmp.availability import vmss
from azmp.azure import backup as azure_backup
from azmp.azure import data_disks
from azmp.azure import disk_types
from azmp.extensions import catalog
from azmp.extensions import cross_platform
from azmp.extensions import health
from azmp.extensions import linux
from azmp.extensions import windows
from azmp.monitoring import alerts
from azmp.monitoring import workbooks
from azmp.recovery import backup
from azmp.recovery import site_recovery
from azmp.recovery import snapshots
from azmp.scaling import autoscale
from azmp.scaling import load_balancing
from azmp.scaling import multiregion
from azmp.scaling import vmss as scaling_vmss


def _ToPlain(value):
  """Converts dataclasses nested in 'value' to dicts."""
  if dataclasses.is_dataclass(value) and not isinstance(value, type):
    return dataclasses.asdict(value)
  if isinstance(value, dict):
    return {k: _ToPlain(v) for k, v in value.items()}
  if isinstance(value, (list, tuple)):
    return [_ToPlain(v) for v in value]
  return value


def _LoadJson(value):
  """Accepts an object, or its JSON text as produced by another helper."""
  if isinstance(value, str):
    return json.loads(value)
  return value


def _BackupTemplate(**kwargs):
  return azure_backup.GenerateBackupTemplate(
      azure_backup.CreateBackupConfiguration(**kwargs))


def _DiskStorageProfile(**kwargs):
  return disk_types.GenerateDiskTemplate(
      disk_types.CreateDiskConfiguration(**kwargs))


def _DataDiskTemplate(**kwargs):
  return data_disks.GenerateDataDiskTemplate(
      data_disks.CreateDataDiskConfiguration(**kwargs))


def _MetricAlertResource(definition):
  return alerts.ToMetricAlertResource(_LoadJson(definition))


def _LogAlertResource(definition, workspace_id):
  return alerts.ToScheduledQueryResource(_LoadJson(definition), workspace_id)


def _WorkbookResource(display_name, definition, **kwargs):
  return workbooks.WorkbookResource(display_name, _LoadJson(definition),
                                    **kwargs)


_HELPERS = {
    # Availability sets, zones and scale sets.
    'availability:set': availability_sets.AvailabilitySet,
    'availability:setRef': availability_sets.AvailabilitySetRef,
    'availability:recommendedFaultDomains':
        availability_sets.RecommendedFaultDomains,
    'availability:recommendedUpdateDomains':
        availability_sets.RecommendedUpdateDomains,
    'availability:setSLA': availability_sets.AvailabilitySetSla,
    'availability:proximityPlacementGroup':
        availability_sets.ProximityPlacementGroup,
    'availability:zones': availability_zones.GetAvailableZones,
    'availability:supportsZones':
        availability_zones.SupportsAvailabilityZones,
    'availability:zoneSupportedRegions':
        availability_zones.GetZoneSupportedRegions,
    'availability:zonalVM': availability_zones.ZonalVm,
    'availability:zoneRedundantDisk': availability_zones.ZoneRedundantDisk,
    'availability:zoneRedundantIP': availability_zones.ZoneRedundantPublicIp,
    'availability:zoneSLA': availability_zones.AvailabilityZoneSla,
    'availability:recommendZoneDistribution':
        availability_zones.RecommendZoneDistribution,
    'availability:vmssFlexible': vmss.VmssFlexible,
    'availability:vmssUniform': vmss.VmssUniform,
    'availability:vmssAutoscale': vmss.VmssAutoscale,
    'availability:cpuAutoscaleRules': vmss.CpuAutoscaleRules,
    'availability:vmssHealthExtension': vmss.VmssHealthExtension,
    'availability:rollingUpgradePolicy': vmss.RollingUpgradePolicy,
    'availability:vmssSLA': vmss.VmssSla,
    'availability:bestPractices': availability.BestPractices,

    # VM backup templates.
    'backup:template': _BackupTemplate,
    'backup:preset': azure_backup.GetPreset,
    'backup:presets': azure_backup.GetAllPresets,

    # Managed disks.
    'disk:typeInfo': disk_types.GetDiskTypeInfo,
    'disk:performanceTier': disk_types.GetPerformanceTier,
    'disk:recommendedCaching': disk_types.GetRecommendedCaching,
    'disk:storageProfile': _DiskStorageProfile,
    'disk:dataDisks': _DataDiskTemplate,
    'disk:dataDiskPreset': data_disks.GetPreset,
    'disk:dataDiskPresets': data_disks.GetAllPresets,
    'disk:maxDataDisks': data_disks.GetMaxDataDisks,

    # Backup, site recovery and snapshots.
    'recovery:vault': backup.RecoveryServicesVault,
    'recovery:backupPolicy': backup.BackupPolicy,
    'recovery:backupPreset': backup.BackupPreset,
    'recovery:enableVMBackup': backup.EnableVmBackup,
    'recovery:estimateBackupStorage': backup.EstimateBackupStorage,
    'recovery:replicationPolicy': site_recovery.ReplicationPolicy,
    'recovery:enableReplication': site_recovery.EnableVmReplication,
    'recovery:recoveryPlan': site_recovery.RecoveryPlan,
    'recovery:pairedRegion': site_recovery.GetRecommendedTargetRegion,
    'recovery:estimateRto': site_recovery.EstimateRto,
    'recovery:estimateRpo': site_recovery.EstimateRpo,
    'recovery:snapshot': snapshots.DiskSnapshot,
    'recovery:restorePointCollection': snapshots.RestorePointCollection,
    'recovery:restorePoint': snapshots.VmRestorePoint,
    'recovery:diskFromSnapshot': snapshots.DiskFromSnapshot,
    'recovery:snapshotCost': snapshots.EstimateSnapshotCost,
    'recovery:snapshotSchedule': snapshots.GetRecommendedSnapshotSchedule,
    'recovery:bestPractices': recovery.BestPractices,

    # Scale sets, autoscale, load balancing and multi-region.
    'scale:vmss.definition': scaling_vmss.CreateVmssDefinition,
    'scale:autoscale.policy': autoscale.CreateAutoscalePolicy,
    'scale:autoscale.metric': autoscale.CreateMetricScaleRule,
    'scale:autoscale.schedule': autoscale.CreateScheduleProfile,
    'scale:autoscale.cpu': autoscale.CreateCpuScalingPolicy,
    'scale:autoscale.businessHours': autoscale.CreateBusinessHoursSchedule,
    'scale:lb.definition': load_balancing.CreateLoadBalancer,
    'scale:lb.frontend': load_balancing.CreateFrontendIpConfig,
    'scale:lb.backendPool': load_balancing.CreateBackendPoolConfig,
    'scale:lb.probe': load_balancing.CreateProbeConfig,
    'scale:lb.rule': load_balancing.CreateLoadBalancingRule,
    'scale:lb.recommendProbe': load_balancing.RecommendHealthProbe,
    'scale:appgw.definition': load_balancing.CreateApplicationGateway,
    'scale:appgw.ipConfig': load_balancing.CreateAppGatewayIpConfig,
    'scale:appgw.frontend': load_balancing.CreateAppGatewayFrontendConfig,
    'scale:appgw.frontendPort': load_balancing.CreateAppGatewayFrontendPort,
    'scale:appgw.backendPool': load_balancing.CreateAppGatewayBackendPool,
    'scale:appgw.httpSetting': load_balancing.CreateAppGatewayHttpSetting,
    'scale:appgw.probe': load_balancing.CreateAppGatewayProbe,
    'scale:appgw.listener': load_balancing.CreateAppGatewayListener,
    'scale:appgw.rule': load_balancing.CreateAppGatewayRoutingRule,
    'scale:appgw.recommendSku': load_balancing.RecommendAppGatewaySku,
    'scale:multiregion.profile': multiregion.CreateTrafficManagerProfile,
    'scale:multiregion.endpoint': multiregion.CreateTrafficManagerEndpoint,
    'scale:multiregion.deployment':
        multiregion.CreateMultiRegionDeploymentPlan,
    'scale:multiregion.failover': multiregion.CreateFailoverPlan,

    # VM extensions.
    'ext:windows.customScript': windows.CustomScriptExtension,
    'ext:windows.monitoringAgent': windows.MonitoringAgentExtension,
    'ext:windows.antimalware': windows.AntimalwareExtension,
    'ext:windows.dsc': windows.DscExtension,
    'ext:windows.domainJoin': windows.DomainJoinExtension,
    'ext:windows.diagnostics': windows.DiagnosticsExtension,
    'ext:windows.gpuDriver': windows.GpuDriverExtension,
    'ext:windows.backup': windows.BackupExtension,
    'ext:linux.customScript': linux.CustomScriptExtension,
    'ext:linux.omsAgent': linux.OmsAgentExtension,
    'ext:linux.securityAgent': linux.SecurityAgentExtension,
    'ext:linux.vmAccess': linux.VmAccessExtension,
    'ext:linux.dependencyAgent': linux.DependencyAgentExtension,
    'ext:linux.gpuDriver': linux.GpuDriverExtension,
    'ext:linux.runCommand': linux.RunCommandExtension,
    'ext:crossplatform.azureMonitorAgent':
        cross_platform.AzureMonitorAgentExtension,
    'ext:crossplatform.azureSecurityAgent':
        cross_platform.AzureSecurityAgentExtension,
    'ext:crossplatform.dependencyAgent':
        cross_platform.DependencyAgentExtension,
    'ext:crossplatform.aadSshLogin': cross_platform.AadSshLoginExtension,
    'ext:crossplatform.keyVault': cross_platform.KeyVaultExtension,
    'ext:health': health.GenerateHealthExtension,
    'ext:list': catalog.ListExtensions,
    'ext:info': catalog.GetExtension,
    'ext:count': catalog.Count,

    # Alerts and workbooks.
    'monitor:cpuAlert': alerts.CreateCpuAlert,
    'monitor:memoryAlert': alerts.CreateMemoryAlert,
    'monitor:costAlert': alerts.CreateCostAnomalyAlert,
    'monitor:scalingAlert': alerts.CreateScalingHealthAlert,
    'monitor:metricResource': _MetricAlertResource,
    'monitor:logResource': _LogAlertResource,
    'workbook:vmPerformance': workbooks.GenerateVmPerformanceWorkbook,
    'workbook:vmssScaling': workbooks.GenerateVmssScalingWorkbook,
    'workbook:costOptimization': workbooks.GenerateCostOptimizationWorkbook,
    'workbook:template': workbooks.GetWorkbookTemplate,
    'workbook:list': workbooks.ListWorkbookTemplates,
    'workbook:query': workbooks.ReadQuery,
    'workbook:resource': _WorkbookResource,
}


def GetHelper(name):
  """Returns the callable registered under 'name'.

  Raises:
    errors.Helpers.UnknownHelperError: if no helper has that name.
  """
  try:
    return _HELPERS[name]
  except KeyError:
    raise errors.Helpers.UnknownHelperError(
        'Unknown helper "{}"'.format(name))


def CallHelper(helper_name, /, *args, **kwargs):
  """Calls the helper 'helper_name' and returns its result as template text.

  The helper name is positional-only so that helpers taking a 'name'
  keyword, such as 'availability:set', receive it unchanged.

  Dicts and lists are returned as JSON indented by two spaces. Everything
  else, including None, is returned unchanged.
  """
  func = GetHelper(helper_name)
  logging.debug('Calling helper %s.', helper_name)
  result = _ToPlain(func(*args, **kwargs))
  if isinstance(result, (dict, list)):
    return arm_util.ToJson(result)
  return result


def ListHelpers(namespace=None):
  """Returns the sorted helper names, optionally only those of 'namespace'."""
  if namespace:
    prefix = namespace.rstrip(':') + ':'
    return sorted(n for n in _HELPERS if n.startswith(prefix))
  return sorted(_HELPERS)
